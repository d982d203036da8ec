#!/usr/bin/env python

# Author: tlsoracle developers
# Released under Gnu GPL v2.0, see LICENSE file for details

from setuptools import setup

setup(name="tlsoracle",
      version="0.1.0",
      author="tlsoracle developers",
      description="Detection of padding, Bleichenbacher and master secret "
                  "oracles in TLS implementations.",
      license="GPLv2",
      python_requires=">=3.6",
      install_requires=["tlslite-ng >= 0.8.0",
                        "numpy",
                        "scipy"],
      extras_require={
          "test": [
              "pytest",
          ],
      },
      packages=["tlsoracle", "tlsoracle.utils"])
