from setuptools import setup, find_packages

with open("README.md", "r") as f:
    long_description = f.read()

setup(
    name="diy-dyndns",
    version="0.1.0",
    author="Dmitry Zeldin",
    author_email="dmitry@zeldin.pro",
    description="Dynamic DNS updater for domains hosted on DigitalOcean",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/ZelJin/diy-dyndns/",
    license="GPLv3+",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: "
        "GNU General Public License v3 or later (GPLv3+)",
        "Topic :: Internet :: Name Service (DNS)",
    ],

    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=[
        "requests",
        "urllib3",
        "importlib_metadata; python_version<'3.10'",
    ],
    python_requires=">=3.7",
    extras_require={
        "test": [
            "flake8",
            "pytest",
            "pytest-cov",
            "pytest-mock",
        ]
    },

    entry_points={
        "console_scripts": [
            "diy-dyndns=diy_dyndns.main:main",
        ],
    },
)
