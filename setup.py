from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as f:
    long_description = f.read()

setup(
    name="netfrix",
    version="0.4",
    description="Browse a remote video share over SSH and stream it to a local player",
    long_description=long_description,
    long_description_content_type="text/markdown",
    license="MIT",
    packages=find_packages(exclude=["tests", "tests.*"]),
    entry_points={
        "console_scripts": [
            "netfrix=netfrix.main:run",
        ],
    },
    install_requires=["questionary", "prompt_toolkit"],
    extras_require={
        "test": ["pytest"],
    },
    python_requires=">=3.10",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "License :: OSI Approved :: MIT License",
        "Operating System :: MacOS",
        "Operating System :: POSIX :: Linux",
        "Programming Language :: Python :: 3",
        "Topic :: Multimedia :: Video :: Display",
    ],
    keywords=["ssh", "video", "streaming", "ffplay", "tui"],
)
