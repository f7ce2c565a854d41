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
pytest fixtures for an embedded LDAP server
"""

import logging
import pytest

from .builder import EmbeddedLdapBuilder


logger = logging.getLogger(__name__)


def pytest_configure(config):
    config.addinivalue_line(
        "markers",
        "ldap(*ldifs, domain, bind_dn, credentials, schemas, backend, "
        "anonymous): configure the embedded_ldap fixture")


def builder_from_marker(marker, tmp_path, search_path=()):
    args = marker.args if marker else ()
    kwargs = marker.kwargs if marker else {}

    builder = EmbeddedLdapBuilder().in_directory(tmp_path)
    builder.resolving_from(*search_path, *kwargs.get("search_path", []))
    builder.importing_ldifs(*args)

    domain = kwargs.get("domain")
    if domain:
        if isinstance(domain, str):
            domain = [domain]
        builder.using_domain_dn(*domain)
    if "bind_dn" in kwargs:
        builder.using_bind_dn(kwargs["bind_dn"])
    if "credentials" in kwargs:
        builder.using_bind_credentials(kwargs["credentials"])
    if "schemas" in kwargs:
        builder.without_default_schema().with_schemas(*kwargs["schemas"])
    if "backend" in kwargs:
        builder.using_backend(kwargs["backend"])
    return builder


@pytest.fixture
def embedded_ldap(request, tmp_path):
    marker = request.node.get_closest_marker("ldap")
    anonymous = marker.kwargs.get("anonymous", False) if marker else False

    builder = builder_from_marker(marker, tmp_path, [request.path.parent])
    ldap = builder.build(authenticated=not anonymous)
    with ldap.running(request.node.nodeid):
        yield ldap

    ldap.server.cleanup()


@pytest.fixture
def ldap_connection(embedded_ldap):
    return embedded_ldap.connection()


@pytest.fixture
def ldap_context(embedded_ldap):
    return embedded_ldap.context()
