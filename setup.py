import setuptools


setuptools.setup(
    name='delugeweb',
    version='0.0.1',
    description='client for the deluge-web json-rpc interface',
    author='Jean-Edouard Boulanger',
    author_email="jean.edouard.boulanger@gmail.com",
    license='MIT',
    python_requires='>=3.10',
    packages=[
        'delugeweb',
        'delugeweb.core',
    ],
    install_requires=[
        'requests',
        'pydantic>=2',
        'orjson',
        'python-dateutil',
        'pytz',
        'pyyaml'
    ],
    extras_require={
        'test': [
            'pytest'
        ]
    }
)
