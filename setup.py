from setuptools import setup, find_packages

# Use find_packages to automatically discover all packages
packages = find_packages(include=["etfdist", "etfdist.*"])

setup(
    name="etf-distributions",
    version="0.1.0",
    description="Exclusive Top Floor (ETF) sampling of arbitrary probability distributions",
    packages=packages,
    package_data={
        "etfdist": ["cli/*.yaml"],
    },
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=[
        "numpy",
        "pandas",
        "scipy",
        "tqdm",
        "pyyaml",
        "typer",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "etfdist=etfdist.cli.main:app",
        ],
    },
)
