#!/usr/bin/env python

# To update PyPi version:
#
# (Make sure you have updated version in __init__.py)
#
# ./run_tests.sh
# python3 setup.py readme
# git commit -am ...
# git tag -a <version> -m <message>
# git push --tags
#
# rm -rf dist
# python3 -m build
# twine upload dist/*

from setuptools import Command, setup

import dnssig
long_description = dnssig.__doc__.rstrip() + "\n"
version = dnssig.version

class GenerateReadme(Command):
    description = "Generates README file from long_description"
    user_options = []
    def initialize_options(self): pass
    def finalize_options(self): pass
    def run(self):
        with open("README", "w") as f:
            f.write(long_description)

setup(name='dnssig',
      version = version,
      description = 'Encode/decode DNS SIG resource records (wire, canonical and zone formats)',
      long_description = long_description,
      long_description_content_type="text/markdown",
      cmdclass = {'readme' : GenerateReadme},
      packages = ['dnssig'],
      package_dir = {'dnssig' : 'dnssig'},
      python_requires = '>=3.8',
      install_requires = ['typing_extensions; python_version < "3.11"'],
      extras_require = {'test' : ['pytest']},
      entry_points = {'console_scripts' : ['dnssig = dnssig.tool:main']},
      license = 'BSD',
      classifiers = [ "Topic :: Internet :: Name Service (DNS)",
                      "Programming Language :: Python :: 3",
                      ],
     )
