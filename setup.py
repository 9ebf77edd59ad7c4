import setuptools
from setuptools import find_packages

setuptools.setup(
    name="imageref",
    version="0.1.0",
    description="Parse, normalize and match container image references",
    license="Apache-2.0",
    python_requires=">=3.10",
    packages=find_packages(include=["imageref", "imageref.*"]),
    install_requires=[],
    extras_require={
        "test": ["pytest", "PyYAML"],
    },
    data_files=[("share/imageref", ["docs/imageref.conf"])],
)
