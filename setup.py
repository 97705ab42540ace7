from setuptools import find_packages, setup

setup(
    name="path-owners",
    version="0.1.0",
    license="Apache License 2.0",

    python_requires=">=3.12",
    description="Resolve per-path code owners from OWNERS files and gate "
                "changes on owner approvals.",

    packages=find_packages(exclude=('*.test', '*.test.*')),

    install_requires=[
        "Click>=8.2,<9.0",
        "ruamel.yaml>=0.17.22,<0.19.0",
        "prometheus-client>=0.17,<1.0",
        "pydantic>=2.7,<3.0",
        "pydantic-settings[yaml]>=2.3,<3.0",
        "cachetools>=5.3,<7.0",
        "python-json-logger>=3.1,<5.0",
    ],

    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-mock>=3.12",
        ],
    },

    classifiers=[
        'Development Status :: 2 - Pre-Alpha',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.12',
    ],
    entry_points={
        'console_scripts': [
            'path-owners = path_owners.cli:root',
        ],
    },
)
