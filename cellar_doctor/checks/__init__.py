# Copyright 2026 Cisco Systems, Inc. and its affiliates
# SPDX-License-Identifier: Apache-2.0

"""
Advisory checks run by ``cellar-doctor``.

Each module groups checks by concern (``PATH``, environment, stray files,
permissions, volumes, packages, git, interpreters).

Convention
~~~~~~~~~~

Every public function follows the pattern::

    def check_<aspect>(ctx: RunContext) -> str | None:
        ...

A check returns ``None`` when it finds nothing, or one human-readable,
multi-line advisory.  Checks never modify the system.  The only state a
check may leave behind is a field of the ``RunContext`` declared for a later
check to read; the registration in
:mod:`cellar_doctor.core.check_factory` records which checks write and read
such fields.
"""
