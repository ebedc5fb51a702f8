# setup.py
from setuptools import find_namespace_packages, setup

setup(
    name="memcalc",
    version="1.0.0",
    description="Count a JVM application's loadable classes and build the memory calculator invocation",
    python_requires=">=3.9",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["memcalc", "memcalc.*"]),
    install_requires=[
        "requests",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        'console_scripts': [
            'memcalc=memcalc.main:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
