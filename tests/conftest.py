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
Embedded LDAP test suite fixtures
"""

import pytest

from embedded_ldap.plugin import embedded_ldap, ldap_connection, ldap_context


class FakeConnection:
    def __init__(self, server, fail_close=False):
        self.server = server
        self.fail_close = fail_close
        self.closed = False

    def unbind_s(self):
        self.server.events.append("connection closed")
        if self.fail_close:
            raise ConnectionResetError("connection went away")
        self.closed = True


class FakeServer:
    """
    Stands in for slapd.Server, recording what the controller does to it.
    """

    def __init__(self, port=38901):
        self.next_port = port
        self.port = 0
        self.listening = False
        self.events = []
        self.connections = []
        self.fail_close = False
        self.fail_stop = False
        self.fail_connect = None

    def start(self):
        self.port = self.next_port
        self.listening = True
        self.events.append("started")

    def stop(self, force=False):
        self.events.append(("stopped", force))
        self.listening = False
        if self.fail_stop:
            raise RuntimeError("slapd refused to die")

    def connect(self):
        if self.fail_connect:
            raise self.fail_connect
        conn = FakeConnection(self, self.fail_close)
        self.connections.append(conn)
        self.events.append("connection opened")
        return conn

    @property
    def uri(self):
        return f"ldap://127.0.0.1:{self.port}"


class FakeContext:
    instances = []

    def __init__(self, environment):
        self.environment = dict(environment)
        self.closed = False
        self.fail_close = False
        FakeContext.instances.append(self)

    def close(self):
        if self.fail_close:
            raise OSError("context close failed")
        self.closed = True


@pytest.fixture
def fake_server():
    return FakeServer()


@pytest.fixture
def fake_context():
    FakeContext.instances = []
    yield FakeContext
    FakeContext.instances = []
