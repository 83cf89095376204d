#!/usr/bin/env python

import sys
import os
import re
from setuptools import setup, find_packages


def load_readme():
    with open('README.rst', 'r') as fd:
        return fd.read()


def load_requirements():
    """Parse requirements.txt"""
    reqs_path = os.path.join('.', 'requirements.txt')
    with open(reqs_path, 'r') as fd:
        requirements = [line.rstrip() for line in fd
                        if line.strip() != ""]
    return requirements


sys.path.append("./tests")
package_name = 'logsieve'
data_dir = "/".join((package_name, "data"))
data_files = ["/".join(("data", fn)) for fn in os.listdir(data_dir)]

init_path = os.path.join(os.path.dirname(__file__), package_name, '__init__.py')
with open(init_path) as f:
    version = re.search("__version__ = '([^']+)'", f.read()).group(1)

setup(name=package_name,
      version=version,
      description='A log filter hiding known messages described by example lines.',
      long_description=load_readme(),
      install_requires=load_requirements(),
      python_requires='>=3.6',
      classifiers=[
          'Development Status :: 4 - Beta',
          'Environment :: Console',
          'Intended Audience :: System Administrators',
          'Intended Audience :: Developers',
          'License :: OSI Approved :: BSD License',
          "Operating System :: OS Independent",
          'Programming Language :: Python :: 3',
          'Topic :: System :: Logging',
          'Topic :: System :: Monitoring'],
      license='The 3-Clause BSD License',

      packages=find_packages(exclude=["tests", "tests.*"]),
      package_data={'logsieve': data_files},
      include_package_data=True,
      entry_points={
          'console_scripts': [
              'logsieve = logsieve.__main__:main',
          ],
      },
      test_suite="tests"
      )
