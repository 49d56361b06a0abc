from setuptools import find_packages, setup

setup(
    name="tf-adopt",
    version="0.1.0",
    license="Apache License 2.0",

    python_requires=">=3.11",
    description="Adopt pre-existing Cloudflare Zero Trust and DNS objects "
                "into OpenTofu/Terraform state before every apply.",

    packages=find_packages(include=("tfadopt", "tfadopt.*")),
    package_data={"tfadopt.test": ["fixtures/*/*.json"]},

    install_requires=[
        "Click>=7.0,<9.0",
        "requests>=2.28,<3.0",
        "urllib3>=1.26,<3.0",
        "pydantic>=1.9,<3.0",
        "sentry-sdk>=1.0,<3.0",
    ],

    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-mock>=3.10",
            "pytest-httpserver>=1.0",
        ],
    },

    test_suite="tfadopt.test",

    classifiers=[
        'Development Status :: 2 - Pre-Alpha',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.11',
    ],
    entry_points={
        'console_scripts': [
            'tf-adopt = tfadopt.cli:cli',
        ],
    },
)
