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
Directory contexts: bound connections driven by an environment mapping
"""

import importlib
import ldap0
import logging
import types

from .environment import (
    INITIAL_CONTEXT_FACTORY,
    PROVIDER_URL,
    SECURITY_AUTHENTICATION,
    SECURITY_CREDENTIALS,
    SECURITY_PRINCIPAL,
)


logger = logging.getLogger(__name__)


def resolve_factory(name):
    module_name, _, attribute = name.rpartition('.')
    if not module_name:
        raise ValueError(f"Not a dotted path: {name!r}")
    return getattr(importlib.import_module(module_name), attribute)


class DirectoryContext:
    """
    A connection opened and bound as the environment describes.

    The factory named by ``initial_context_factory`` is called with the
    ``provider_url`` and has to return an ldap0 LDAPObject compatible
    object. A simple bind is done when ``security_authentication`` is
    "simple", which is the default as soon as a principal is set.
    Errors from connecting or binding are not caught.
    """

    def __init__(self, environment):
        self.environment = types.MappingProxyType(dict(environment))

        factory = resolve_factory(self.environment[INITIAL_CONTEXT_FACTORY])
        self.conn = factory(self.environment[PROVIDER_URL])

        principal = self.environment.get(SECURITY_PRINCIPAL)
        mechanism = self.environment.get(
            SECURITY_AUTHENTICATION, "simple" if principal else "none")
        if mechanism == "simple":
            self.conn.simple_bind_s(
                principal or "",
                self.environment.get(SECURITY_CREDENTIALS) or "")
        elif mechanism != "none":
            raise NotImplementedError(
                f"Authentication mechanism {mechanism!r} not supported")
        logger.debug("Context for %s bound as %r",
                     self.environment[PROVIDER_URL], principal)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def whoami(self):
        return self.conn.whoami_s()

    def lookup(self, dn, attrlist=None):
        result = self.conn.search_s(dn, ldap0.SCOPE_BASE,
                                    attrlist=attrlist)
        return result[0].entry_s

    def search(self, base, filterstr="(objectClass=*)",
               scope=ldap0.SCOPE_SUBTREE, attrlist=None):
        return {entry.dn_s: entry.entry_s
                for entry in self.conn.search_s(base, scope, filterstr,
                                                attrlist=attrlist)}

    def add(self, dn, attributes):
        entry = {}
        for name, values in attributes.items():
            if isinstance(values, (str, bytes)):
                values = [values]
            entry[name] = [value.encode() if isinstance(value, str)
                           else value for value in values]
        self.conn.add_s(dn, entry)

    def delete(self, dn):
        self.conn.delete_s(dn)

    def close(self):
        self.conn.unbind_s()
