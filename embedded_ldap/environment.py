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
Connection environment for directory contexts
"""

import ldapurl


CONTROL_FACTORIES = "control_factories"
PROVIDER_URL = "provider_url"
INITIAL_CONTEXT_FACTORY = "initial_context_factory"
SECURITY_AUTHENTICATION = "security_authentication"
SECURITY_PRINCIPAL = "security_principal"
SECURITY_CREDENTIALS = "security_credentials"

DEFAULT_CONTROL_FACTORIES = "ldap0.controls.KNOWN_RESPONSE_CONTROLS"
DEFAULT_CONTEXT_FACTORY = "ldap0.ldapobject.LDAPObject"

LOOPBACK = "127.0.0.1"


class AuthenticationConfiguration:
    """
    Simple bind credentials handed to every directory context.
    """

    __slots__ = ("principal", "credentials")

    def __init__(self, principal, credentials):
        object.__setattr__(self, "principal", principal)
        object.__setattr__(self, "credentials", credentials)

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __eq__(self, other):
        if not isinstance(other, AuthenticationConfiguration):
            return NotImplemented
        return (self.principal, self.credentials) == \
            (other.principal, other.credentials)

    def __hash__(self):
        return hash((self.principal, self.credentials))

    def __repr__(self):
        return f"<AuthenticationConfiguration principal={self.principal!r}>"

    def to_environment(self):
        return {
            SECURITY_AUTHENTICATION: "simple",
            SECURITY_PRINCIPAL: self.principal,
            SECURITY_CREDENTIALS: self.credentials,
        }


def provider_url(port):
    return ldapurl.LDAPUrl(urlscheme="ldap",
                           hostport=f"{LOOPBACK}:{port}").initializeUrl()


def create_ldap_environment(server, authentication=None):
    # The port is read on every call, it is only known once slapd listens
    environment = {
        CONTROL_FACTORIES: DEFAULT_CONTROL_FACTORIES,
        PROVIDER_URL: provider_url(server.port),
        INITIAL_CONTEXT_FACTORY: DEFAULT_CONTEXT_FACTORY,
    }
    if authentication is not None:
        environment.update(authentication.to_environment())
    return environment
