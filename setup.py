from setuptools import find_packages, setup

package_name = "lidar_align"

setup(
    name=package_name,
    version="0.1.0",
    packages=find_packages(exclude=["test"]),
    install_requires=["setuptools", "numpy", "scipy", "pydantic>=2", "pyyaml", "rosbags>=0.10"],
    extras_require={"test": ["pytest"]},
    python_requires=">=3.10",
    zip_safe=True,
    description="LiDAR / odometry input loading and normalization for lidar-odometry alignment",
    license="Apache-2.0",
    entry_points={
        "console_scripts": [
            # Load point clouds and a trajectory, report what was ingested
            "lidar_align_load = lidar_align.frontend.load_inputs:main",
        ],
    },
)
