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
Fluent construction of embedded LDAP fixtures
"""

import logging
import pathlib
import tempfile

from .environment import AuthenticationConfiguration
from .fixture import EmbeddedLdap
from .slapd import Configuration, DEFAULT_SCHEMAS


DEFAULT_DOMAIN = "dc=example,dc=com"
DEFAULT_BIND_DN = "cn=Directory Manager"
DEFAULT_BIND_CREDENTIALS = "password"


logger = logging.getLogger(__name__)


class EmbeddedLdapBuilder:
    def __init__(self):
        self.domain_dns = []
        self.bind_dn = DEFAULT_BIND_DN
        self.bind_credentials = DEFAULT_BIND_CREDENTIALS
        self.schemas = list(DEFAULT_SCHEMAS)
        self.backend = "mdb"
        self.ldifs = []
        self.port = 0
        self.directory = None
        self.search_path = None

    def using_domain_dn(self, *dns):
        self.domain_dns.extend(dns)
        return self

    def using_bind_dn(self, dn):
        self.bind_dn = dn
        return self

    def using_bind_credentials(self, password):
        self.bind_credentials = password
        return self

    def with_schemas(self, *schemas):
        for schema in schemas:
            if schema not in self.schemas:
                self.schemas.append(schema)
        return self

    def without_default_schema(self):
        self.schemas = [schema for schema in self.schemas
                        if schema not in DEFAULT_SCHEMAS]
        return self

    def using_backend(self, name):
        self.backend = name
        return self

    def importing_ldifs(self, *refs):
        self.ldifs.extend(refs)
        return self

    def resolving_from(self, *directories):
        self.search_path = [pathlib.Path(d) for d in directories]
        return self

    def binding_to_port(self, port):
        self.port = port
        return self

    def in_directory(self, path):
        self.directory = pathlib.Path(path)
        return self

    def configuration(self):
        return Configuration(
            suffixes=self.domain_dns or [DEFAULT_DOMAIN],
            rootdn=self.bind_dn,
            secret=self.bind_credentials,
            schemas=self.schemas,
            backend=self.backend,
            port=self.port)

    def build(self, authenticated=True):
        config = self.configuration()
        authentication = None
        if authenticated:
            authentication = AuthenticationConfiguration(
                self.bind_dn, self.bind_credentials)

        where = None
        if self.directory is not None:
            self.directory.mkdir(parents=True, exist_ok=True)
            where = tempfile.TemporaryDirectory(dir=self.directory)

        logger.debug("Building embedded LDAP server for %r", config)
        return EmbeddedLdap.create_for_configuration(
            config, authentication, self.ldifs, where, self.search_path)
