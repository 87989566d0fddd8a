import setuptools

with open("README.md", "r") as fh:
    long_description = fh.read()

setuptools.setup(
    name="pydyslink",
    version="1.0.0",
    description="A command line client controlling Dyson Link purifiers (fan mode, speed, oscillation, heat) locally over MQTT",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=setuptools.find_packages(exclude=["tests"]),
    install_requires=["paho-mqtt>=2.0,<3.0", "zeroconf>=0.38"],
    entry_points={"console_scripts": ["dyslink=pydyslink.cli:main"]},
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.9",
)
