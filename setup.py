"""
Peephole - Accessors for non-public members in tests

This setup.py file is provided for pip install compatibility.
"""

from setuptools import find_packages, setup

if __name__ == "__main__":
    setup(
        name="peephole",
        version="0.1.0",
        description="Reflection-based accessors that let tests reach non-public fields, properties, methods and events.",
        long_description=open("README.md").read(),
        long_description_content_type="text/markdown",
        package_dir={"": "src"},
        packages=find_packages("src"),
        python_requires=">=3.10",
        install_requires=[
            "pydantic>=2.0",
            "PyYAML>=6.0",
        ],
        extras_require={
            "test": [
                "pytest>=7.0",
            ],
        },
        classifiers=[
            "Development Status :: 4 - Beta",
            "Intended Audience :: Developers",
            "Programming Language :: Python :: 3",
            "Programming Language :: Python :: 3.10",
            "Programming Language :: Python :: 3.11",
            "Programming Language :: Python :: 3.12",
            "Topic :: Software Development :: Testing",
        ],
    )
