#!/usr/bin/env python3

"""
This file is part of SynPN.

SynPN is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.

SynPN is distributed in the hope that it will be useful,
but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
GNU General Public License for more details.

You should have received a copy of the GNU General Public License
along with SynPN. If not, see <https://www.gnu.org/licenses/>.
"""

from setuptools import find_namespace_packages, setup


setup(
    name="SynPN",
    version="1.0.0",
    description="SynPN - region-based synthesis of Petri nets from labeled transition systems",
    author="SynPN developers",
    license="GPLv3",
    python_requires=">=3.9",
    packages=find_namespace_packages(include=["synpn", "synpn.*"]),
    install_requires=["z3-solver", "PuLP"],
    extras_require={"test": ["pytest"]}
)
