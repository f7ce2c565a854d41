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
Server construction and LDIF bulk loading
"""

import importlib.resources
import logging
import pathlib
import subprocess
import tempfile

from . import slapd


logger = logging.getLogger(__name__)


class ConfigurationError(RuntimeError):
    pass


class ResourceNotFoundError(FileNotFoundError):
    pass


class LdifImportError(RuntimeError):
    pass


def resolve_resource(ref, search_path=None):
    """
    Turn an LDIF reference into a path. Existing paths win, then
    "package:name" resources, then names relative to search_path.
    """
    path = pathlib.Path(ref)
    if path.is_file():
        return path.absolute()

    if isinstance(ref, str) and ':' in ref:
        package, _, name = ref.partition(':')
        try:
            resource = importlib.resources.files(package).joinpath(name)
        except ModuleNotFoundError as e:
            raise ResourceNotFoundError(
                f"No package {package!r} for resource {ref!r}") from e
        if resource.is_file():
            return pathlib.Path(str(resource))

    for directory in search_path or [pathlib.Path.cwd()]:
        candidate = pathlib.Path(directory) / path
        if candidate.is_file():
            return candidate.absolute()

    raise ResourceNotFoundError(f"Can not find LDIF resource {ref!r}")


def create_server(config, ldifs=None, where=None, search_path=None):
    """
    Build a server that is not listening yet and load each LDIF into it in
    order. Nothing is returned unless every step succeeded.
    """
    if where is None:
        where = tempfile.TemporaryDirectory(prefix="embedded-ldap-")
    try:
        server = slapd.Server(where, config)
    except (OSError, subprocess.CalledProcessError) as e:
        where.cleanup()
        raise ConfigurationError(
            "Can not initiate embedded LDAP server due to an exception") from e

    try:
        for ldif in ldifs or []:
            path = resolve_resource(ldif, search_path)
            try:
                server.import_ldif(path, clear=False)
            except subprocess.CalledProcessError as e:
                raise LdifImportError(
                    f"Could not import {path}: {e.stderr}") from e
            logger.info("Imported %s", path)
    except BaseException:
        server.cleanup()
        raise

    return server
