from setuptools import setup, find_packages

with open("requirements.txt") as f:
    requirements = f.read().splitlines()

setup(
    name="tvdepay",
    version="0.1.0",
    packages=find_packages(include=["tvdepay", "tvdepay.*"]),
    include_package_data=True,
    install_requires=requirements,
    extras_require={
        "test": [
            "pytest",
            "responses",
        ],
    },
    entry_points={
        "console_scripts": [
            "tvdepay=tvdepay.cli_module.cli:main",
        ],
    },
)
