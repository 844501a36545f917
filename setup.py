# Copyright DataStax, Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

from setuptools import find_namespace_packages, setup
from os import path

VERSION = "0.1.0"

this_directory = path.abspath(path.dirname(__file__))
with open(path.join(this_directory, "README.md"), encoding="utf-8") as f:
    long_description = f.read()


def read_requirements(file_name):
    with open(path.join(this_directory, file_name), encoding="utf-8") as f:
        return [
            req_line.strip()
            for req_line in f.readlines()
            if req_line.strip() != ""
            if req_line.strip()[0] != "#"
            if "-e ." not in req_line
            if not req_line.strip().startswith("-r")
        ]


setup(
    name="crudclient",
    packages=find_namespace_packages(include=["crudclient", "crudclient.*"]),
    package_data={"crudclient": ["py.typed"]},
    version=VERSION,
    license="Apache license 2.0",
    description="A typed Python client for the collections of a CRUD service",
    long_description=long_description,
    long_description_content_type="text/markdown",
    keywords=["CRUD", "REST", "MongoDB", "client"],
    python_requires=">=3.8",
    install_requires=read_requirements("requirements.txt"),
    extras_require={
        "test": read_requirements("requirements-dev.txt"),
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Libraries",
        "License :: OSI Approved :: Apache Software License",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)
