#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# This work is part of OpenLDAP Software <http://www.openldap.org/>.
#
# Copyright 2021-2022 The OpenLDAP Foundation.
# All rights reserved.
#
# Redistribution and use in source and binary forms, with or without
# modification, are permitted only as authorized by the OpenLDAP
# Public License.
#
# A copy of this license is available in the file LICENSE in the
# top-level directory of the distribution or, alternatively, at
# <http://www.OpenLDAP.org/license.html>.
#
# ACKNOWLEDGEMENTS:
# This work was initially developed by Ondřej Kuzník
# for inclusion in OpenLDAP Software.
"""
Database sections for the generated slapd.conf
"""

import logging
import shutil


logger = logging.getLogger(__name__)


class Database:
    have_directory = True
    modules = []

    def __init__(self, server, config, backend):
        self.server = server
        self.backend = backend
        self.suffixes = config.suffixes
        self.rootdn = config.rootdn
        self.secret = config.secret

        if self.have_directory:
            self.directory = server.home/backend
            self.directory.mkdir(exist_ok=True)

    @property
    def suffix(self):
        return self.suffixes[0]

    def _directives(self):
        directives = [("database", self.backend)]
        directives += [("suffix", f'"{suffix}"') for suffix in self.suffixes]
        directives += [
            ("rootdn", f'"{self.rootdn}"'),
            ("rootpw", self.secret),
        ]
        if self.have_directory:
            directives.append(("directory", str(self.directory)))
        return directives

    def config(self):
        return "\n" + "".join(f"{key} {value}\n"
                              for key, value in self._directives())

    def clear(self):
        if not self.have_directory:
            raise NotImplementedError
        logger.debug("Clearing database directory %s", self.directory)
        shutil.rmtree(self.directory)
        self.directory.mkdir()


class MDB(Database):
    have_directory = True
    modules = ["back_mdb"]

    _size = 1024 ** 3

    def __init__(self, server, config):
        super().__init__(server, config, "mdb")

    def _directives(self):
        directives = [
            ("maxsize", str(self._size)),
        ]
        return [*super()._directives(), *directives]


class LDIF(Database):
    have_directory = True

    def __init__(self, server, config):
        super().__init__(server, config, "ldif")


backend_types = {
    "mdb": MDB,
    "ldif": LDIF,
}
