import setuptools


setuptools.setup(
    name="quatsym",
    version="0.3.0",
    description="Rotational symmetry detection for assemblies of repeated subunits",
    package_dir={"": "src"},
    packages=setuptools.find_packages(where="src"),
    python_requires=">=3.9",
    install_requires=[
        "numpy",
        "torch",
        "mpi4py",
        "mpich; sys_platform != 'win32'",
        "psutil",
        "PyYAML",
    ],
    extras_require={
        "test": ["pytest", "pytest-mpi"],
    },
)
