from setuptools import setup, find_packages

with open('npainflation/_version.py') as f:
    exec(f.read())

setup(
    name="npainflation",
    version=__version__,
    install_requires=["numpy", "sympy", "scipy", "numba", "tqdm", "networkx"],
    extras_require={
        "test": ["pytest"]
    },
    author="Emanuel-Cristian Boghiu, Elie Wolfe, Alejandro Pozas-Kerstjens",
    author_email="cristian.boghiu@icfo.eu, ewolfe@pitp.ca, physics@alexpozas.com",
    description="Moment and localizing matrices for the NPA hierarchy and "
                + "quantum causal inflation",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    python_requires=">=3.8",
    packages=find_packages(exclude=["test", "doc*", "example*"]),
    package_data={"npainflation": ["VERSION.txt"]},
    license="GNU GPL v. 3.0",
    zip_safe=False,  # To avoid problems with Numba, https://github.com/numba/numba/issues/4908
)
