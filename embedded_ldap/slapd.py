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
Disposable slapd instances
"""

import ldap0
import ldapurl
import logging
import os
import pathlib
import shutil
import socket
import subprocess
import textwrap
import time

from ldap0.ldapobject import LDAPObject

from .backends import backend_types


def _find_slapd():
    if 'SLAPD' in os.environ:
        return pathlib.Path(os.environ['SLAPD'])
    found = shutil.which('slapd')
    if found:
        return pathlib.Path(found)
    return pathlib.Path('/usr/sbin/slapd')


def _find_schemadir():
    if 'SLAPD_SCHEMADIR' in os.environ:
        return pathlib.Path(os.environ['SLAPD_SCHEMADIR'])
    for candidate in ('/etc/ldap/schema', '/etc/openldap/schema'):
        if pathlib.Path(candidate).is_dir():
            return pathlib.Path(candidate)
    return pathlib.Path('/etc/ldap/schema')


def _find_modulepath():
    if 'SLAPD_MODULEPATH' in os.environ:
        return os.environ['SLAPD_MODULEPATH'] or None
    for candidate in ('/usr/lib/ldap', '/usr/lib64/openldap',
                      '/usr/lib/openldap'):
        if list(pathlib.Path(candidate).glob('back_mdb*')):
            return candidate
    return None


SLAPD = _find_slapd()
SCHEMADIR = _find_schemadir()
MODULEPATH = _find_modulepath()

DEFAULT_SCHEMAS = ["core", "cosine", "inetorgperson", "nis"]


logger = logging.getLogger(__name__)


class ServerStartupError(RuntimeError):
    pass


def free_port(host='127.0.0.1'):
    """
    Ask the OS for an unused TCP port. slapd cannot listen on port 0 and
    report back, so the port is reserved here and handed over.
    """
    with socket.create_server((host, 0)) as waiter:
        return waiter.getsockname()[1]


class Configuration:
    def __init__(self, suffixes=("dc=example,dc=com",),
                 rootdn="cn=Directory Manager", secret="password",
                 schemas=None, backend="mdb", host="127.0.0.1", port=0,
                 modules=None, timeout=10):
        if isinstance(suffixes, str):
            suffixes = (suffixes,)
        if not suffixes:
            raise ValueError("At least one suffix is required")
        if backend not in backend_types:
            raise ValueError(f"Unknown backend {backend!r}")

        self.suffixes = tuple(suffixes)
        self.rootdn = rootdn
        self.secret = secret
        self.schemas = list(DEFAULT_SCHEMAS if schemas is None else schemas)
        self.backend = backend
        self.host = host
        self.port = port
        self.modules = list(modules or [])
        self.timeout = timeout

    def __repr__(self):
        return (f"<Configuration suffixes={self.suffixes!r} "
                f"backend={self.backend!r} port={self.port}>")


class Server:
    """
    One slapd process with a private home directory. The configuration is
    written and checked on construction, the process only runs between
    start() and stop().
    """

    def __init__(self, where, config):
        self.path = where
        self.home = pathlib.Path(self.path.name)
        self.executable = SLAPD
        self.config = config

        self.level = "0"
        self.port = config.port
        self.process = None

        self.database = backend_types[config.backend](self, config)

        if not (self.home/'slapd.conf').is_file():
            self.create_config()
        self.test()

    def create_config(self):
        includes = []
        for schema in self.config.schemas:
            if not isinstance(schema, pathlib.Path):
                schema = SCHEMADIR / (schema + ".schema")
            includes.append(f"include {schema}\n")

        # Backends are only loaded as modules when slapd was built with
        # them as such, i.e. when a module path is given
        modules = []
        load = list(self.config.modules)
        if MODULEPATH:
            modules.append(f"modulepath {MODULEPATH}\n")
            load = [*self.database.modules, *load]
        for module in load:
            modules.append(f"moduleload {module}\n")

        with open(self.home/'slapd.conf', mode='w') as config:
            config.write("".join(includes))
            config.write("".join(modules))
            config.write(textwrap.dedent("""
                pidfile {home}/slapd.pid
                argsfile {home}/slapd.args
            """.format(home=self.home)))
            config.write(self.database.config())

    def _run(self, *args, **kwargs):
        args = [str(arg) for arg in [self.executable, *args]]
        return subprocess.run(args, capture_output=True, check=True,
                              cwd=self.home, text=True, **kwargs)

    def test(self):
        return self._run('-T', 'test', '-d', self.level,
                         '-f', self.home/'slapd.conf')

    def import_ldif(self, path, clear=False):
        """
        Bulk load an LDIF file with slapadd. Only valid while the server
        is not running; clear=True empties the database first.
        """
        if self.process:
            raise RuntimeError("can not import into a running server")

        if clear:
            self.database.clear()

        logger.debug("Importing %s into %s", path, self.home)
        return self._run('-T', 'add', '-d', self.level, '-q',
                         '-f', self.home/'slapd.conf', '-n', '1',
                         '-l', pathlib.Path(path).absolute())

    def start(self, port=None):
        if self.process:
            raise RuntimeError("process %d still running" % self.process.pid)

        if port is not None:
            self.port = port
        if not self.port:
            self.port = free_port(self.config.host)

        listeners = [
            'ldap://%s:%d' % (self.config.host, self.port),
        ]
        args = [self.executable, '-d', self.level,
                '-f', self.home/'slapd.conf',
                '-h', ' '.join(listeners)]

        with open(self.home/'slapd.log', 'a+') as log:
            args = [str(arg) for arg in args]
            self.process = subprocess.Popen(args, stderr=log, cwd=self.home)

        try:
            self.wait(self.config.timeout)
        except ServerStartupError:
            self.stop(force=True)
            raise
        logger.info("slapd %d listening on %s", self.process.pid, self.uri)

    def wait(self, timeout):
        deadline = time.monotonic() + timeout
        while True:
            if self.process.poll() is not None:
                raise ServerStartupError(
                    "slapd exited with status %d, see %s" %
                    (self.process.returncode, self.home/'slapd.log'))
            try:
                conn = self.connect()
                conn.search_s("", ldap0.SCOPE_BASE)
                conn.unbind_s()
                return
            except ldap0.SERVER_DOWN:
                if time.monotonic() > deadline:
                    raise ServerStartupError(
                        "slapd did not answer on %s within %ss" %
                        (self.uri, timeout))
                time.sleep(0.05)

    def stop(self, force=False):
        if self.process:
            self.process.terminate()
            try:
                self.process.wait(timeout=None if not force else 5)
            except subprocess.TimeoutExpired:
                logger.warning("slapd %d ignored SIGTERM, killing it",
                               self.process.pid)
                self.process.kill()
                self.process.wait()
            logger.info("slapd %d stopped", self.process.pid)
        self.process = None

    @property
    def is_running(self):
        return self.process is not None and self.process.poll() is None

    def connect(self):
        return LDAPObject(str(self.uri))

    def cleanup(self):
        self.stop(force=True)
        self.path.cleanup()

    @property
    def uri(self):
        return ldapurl.LDAPUrl(urlscheme="ldap",
                               hostport="%s:%d" % (self.config.host,
                                                   self.port))

