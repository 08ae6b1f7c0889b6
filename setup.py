import setuptools

with open("README.rst", "r") as fh:
    long_description = fh.read()

setuptools.setup(
    name="quicknotes",
    version="0.1.0",
    description="Short, color-tagged text notes kept on the local device.",
    long_description=long_description,
    long_description_content_type="text/x-rst",
    packages=setuptools.find_packages('src'),
    package_dir={'': 'src'},
    entry_points={
        'console_scripts': [
            'quicknotes = quicknotes.cli:main'
        ]
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    install_requires=[
        'Mako>=1.1.3',
        'shortuuid',
        'terminaltables',
    ],
    extras_require={
        'test': [
            'freezegun',
            'pyfakefs',
            'pytest',
            'pytest-mock',
        ],
    },
    python_requires='>=3.10',
)
