#!/usr/bin/env python
"""
pytest plugin script.

Puts ./lib/ on the path so that plain ``pytest`` from a checkout tests
the local package.

"""
import os
import sys

import pytest


# this requires that sqlalchemy.testing was not already
# imported in order to work
pytest.register_assert_rewrite("sqlalchemy.testing.assertions")


if not sys.flags.no_user_site:
    # this is needed so that test scenarios like plain "pytest" work
    # correctly.  These commands assume that the package in question
    # is locally present, but since we have ./lib/, we need to punch
    # that in.  We check no_user_site to honor the use of this flag.
    sys.path.insert(
        0,
        os.path.abspath(
            os.path.join(
                os.path.dirname(os.path.abspath(__file__)), "..", "lib"
            )
        ),
    )
