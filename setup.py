import setuptools

with open("README.md", "r") as fh:
    long_description = fh.read()

setuptools.setup(
    name="binfiles",
    version="0.1.0",
    author="Gianluca Pacchiella",
    author_email="gp@ktln2.org",
    description="Binary images and Intel HEX files for humans",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/gipi/binfiles",
    packages=setuptools.find_packages(exclude=["tests"]),
    install_requires=[
        'bitstring>=4.0',
    ],
    extras_require={
        'test': [
            'pytest',
        ],
    },
    python_requires=">=3.8",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: GPLv2 License",
        "Operating System :: OS Independent",
    ],
)
