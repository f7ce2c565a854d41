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
DirectoryContext driven by fake LDAPObject factories
"""

import pytest

from ldap0.ldapobject import LDAPObject

from embedded_ldap.context import DirectoryContext, resolve_factory
from embedded_ldap.environment import (
    AuthenticationConfiguration,
    create_ldap_environment,
    INITIAL_CONTEXT_FACTORY,
    SECURITY_AUTHENTICATION,
)


class Result:
    def __init__(self, dn_s, entry_s):
        self.dn_s = dn_s
        self.entry_s = entry_s


class FakeLDAPObject:
    def __init__(self, uri):
        self.uri = uri
        self.calls = []

    def simple_bind_s(self, who, cred):
        self.calls.append(("bind", who, cred))

    def search_s(self, base, scope, filterstr="(objectClass=*)",
                 attrlist=None):
        self.calls.append(("search", base, scope, filterstr, attrlist))
        return [Result(base, {"cn": ["alice"]})]

    def add_s(self, dn, entry):
        self.calls.append(("add", dn, entry))

    def delete_s(self, dn):
        self.calls.append(("delete", dn))

    def whoami_s(self):
        return "dn:cn=admin"

    def unbind_s(self):
        self.calls.append(("unbind",))


class PortOnly:
    port = 10389


def environment(authentication=None, **extra):
    result = create_ldap_environment(PortOnly(), authentication)
    result[INITIAL_CONTEXT_FACTORY] = f"{__name__}.FakeLDAPObject"
    result.update(extra)
    return result


def test_resolve_factory():
    assert resolve_factory("ldap0.ldapobject.LDAPObject") is LDAPObject
    with pytest.raises(ValueError):
        resolve_factory("LDAPObject")


def test_anonymous_context_does_not_bind():
    context = DirectoryContext(environment())
    assert context.conn.uri == "ldap://127.0.0.1:10389"
    assert context.conn.calls == []


def test_simple_bind():
    auth = AuthenticationConfiguration("cn=admin", "secret")
    context = DirectoryContext(environment(auth))
    assert context.conn.calls == [("bind", "cn=admin", "secret")]
    assert context.whoami() == "dn:cn=admin"


def test_unsupported_mechanism():
    with pytest.raises(NotImplementedError):
        DirectoryContext(environment(**{SECURITY_AUTHENTICATION: "GSSAPI"}))


def test_environment_is_read_only():
    context = DirectoryContext(environment())
    with pytest.raises(TypeError):
        context.environment[INITIAL_CONTEXT_FACTORY] = "other.Factory"


def test_operations():
    with DirectoryContext(environment()) as context:
        assert context.lookup("uid=alice,dc=example,dc=com") == \
            {"cn": ["alice"]}
        assert context.search("dc=example,dc=com", "(cn=alice)") == \
            {"dc=example,dc=com": {"cn": ["alice"]}}

        context.add("cn=test,dc=example,dc=com",
                    {"objectClass": ["device"], "cn": "test"})
        context.delete("cn=test,dc=example,dc=com")
        calls = context.conn.calls

    assert ("add", "cn=test,dc=example,dc=com",
            {"objectClass": [b"device"], "cn": [b"test"]}) in calls
    assert ("delete", "cn=test,dc=example,dc=com") in calls
    assert calls[-1] == ("unbind",)
