"""Nova Calc - Basic, scientific and AI-assisted calculator."""
from setuptools import setup, find_packages

setup(
    name="nova-calc",
    version="1.0.0",
    description="Calculator with scientific functions, AI-assisted solving and persistent history",
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,
    package_data={
        "nova_calc": ["templates/*"],
    },
    install_requires=[
        "click>=8.1.0",
        "jinja2>=3.1.0",
        "rich>=13.0.0",
        "questionary>=2.0.0",
        "requests>=2.31.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "nova-calc=nova_calc.cli:main",
        ],
    },
    python_requires=">=3.10",
)
