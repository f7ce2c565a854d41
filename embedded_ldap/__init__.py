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
Disposable slapd instances as test fixtures
"""

from .builder import EmbeddedLdapBuilder
from .context import DirectoryContext
from .environment import AuthenticationConfiguration, create_ldap_environment
from .fixture import EmbeddedLdap, LifecycleError, State
from .loader import (
    ConfigurationError,
    LdifImportError,
    ResourceNotFoundError,
    create_server,
)
from .slapd import Configuration, Server, ServerStartupError

__all__ = [
    "AuthenticationConfiguration",
    "Configuration",
    "ConfigurationError",
    "DirectoryContext",
    "EmbeddedLdap",
    "EmbeddedLdapBuilder",
    "LdifImportError",
    "LifecycleError",
    "ResourceNotFoundError",
    "Server",
    "ServerStartupError",
    "State",
    "create_ldap_environment",
    "create_server",
]
