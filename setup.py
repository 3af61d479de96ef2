"""Install the app registry package."""

from setuptools import setup, find_packages

setup(
    name='appregistry',
    version='0.1.0',
    packages=find_packages(include=['appregistry', 'appregistry.*'],
                           exclude=['*tests*']),
    python_requires='>=3.8',
    install_requires=[
        "authlib",
        "flask",
        "flask-sqlalchemy>=3.0",
        "python-json-logger",
        "pytz",
        "sqlalchemy",
        "werkzeug",
        "wtforms"
    ],
    extras_require={
        'test': ['pytest']
    },
    zip_safe=False
)
