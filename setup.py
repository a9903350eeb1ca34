from os import path

from setuptools import find_packages, setup

this_dir = path.abspath(path.dirname(__file__))
with open(path.join(this_dir, "README.md"), encoding="utf-8") as f:
    long_description = f.read()

setup(
    name="carflow",
    description="Particle based car traffic simulation over road networks",
    long_description=long_description,
    long_description_content_type="text/markdown",
    version="0.1.0",
    packages=find_packages(exclude=("tests", "examples")),
    package_data={"carflow": ["engine.ini"]},
    include_package_data=True,
    zip_safe=True,
    python_requires=">=3.8",
    install_requires=[
        "cached-property>=1.5.2",
        "click>=7.1.2",  # used in cfl
        "numpy>=1.19.5",
        "rich>=11.2.0",
        "tableprint>=0.9.1",
    ],
    extras_require={
        "test": [
            # The following are for testing
            "pytest>=6.2.5",
        ],
    },
    entry_points={"console_scripts": ["cfl=cli.cli:cfl"]},
)
