import setuptools

setuptools.setup(
    name="genebinary",
    version="0.1.0",
    description=(
        "Binary alteration matrices from mutation, fusion and copy number data"
    ),
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    packages=setuptools.find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "natsort>=8.1.0",
        "numpy>=1.22.4",
        "pandas>=1.4.2",
        "pyarrow>=10.0.0",
        "setuptools>=60.10.0",
        "statsmodels>=0.13.0",
        "tqdm>=4.64.0",
        "importlib_resources",
    ],
    extras_require={"test": ["pytest>=7.0"]},
    classifiers=[
        "Programming Language :: Python",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.12",
    ],
    include_package_data=True,
    package_data={"": ["data/*"]},
)
