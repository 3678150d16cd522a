from setuptools import setup, find_packages

setup(
    name="FloatCodec",
    version="0.1.0",
    description="IEEE-754 half/single/double bit pattern encoder and decoder",
    author="FloatCodec Project",
    packages=find_packages(exclude=["tests", "tests.*"]),  # This will find 'float_codec'
    install_requires=[
        "torch>=2.0.0",
        "numpy",
    ],
    extras_require={
        "test": ["pytest"],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.8",
)
