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
Lifecycle of an embedded LDAP server around a piece of test code
"""

import contextlib
import enum
import functools
import logging

from .context import DirectoryContext
from .environment import create_ldap_environment
from .loader import create_server


logger = logging.getLogger(__name__)


class LifecycleError(RuntimeError):
    pass


class State(enum.Enum):
    NOT_STARTED = "not started"
    STARTED = "started"


class EmbeddedLdap:
    """
    Owns one server and hands out at most one connection and one
    directory context per run. Handles only exist between start and
    teardown of a run, see running() and wrap().
    """

    def __init__(self, server, authentication=None,
                 context_factory=DirectoryContext):
        self._server = server
        self.authentication = authentication
        self.context_factory = context_factory

        self._connection = None
        self._context = None
        self._state = State.NOT_STARTED

    @classmethod
    def create_for_configuration(cls, config, authentication=None,
                                 ldifs=None, where=None, search_path=None):
        return cls(create_server(config, ldifs, where, search_path),
                   authentication)

    @property
    def server(self):
        return self._server

    @property
    def state(self):
        return self._state

    @property
    def is_started(self):
        return self._state is State.STARTED

    @property
    def port(self):
        return self._server.port

    @property
    def uri(self):
        return self._server.uri

    def _check_started(self, what):
        if not self.is_started:
            raise LifecycleError(
                f"Can not get {what} before the embedded LDAP server "
                f"has been started")

    def connection(self):
        self._check_started("a connection")
        if self._connection is None:
            self._connection = self._server.connect()
        return self._connection

    def directory_context(self):
        self._check_started("a directory context")
        if self._context is None:
            self._context = self.context_factory(
                create_ldap_environment(self._server, self.authentication))
        return self._context

    def context(self):
        return self.directory_context()

    def _start(self):
        self._server.start()
        self._state = State.STARTED

    def _teardown(self):
        connection, self._connection = self._connection, None
        context, self._context = self._context, None
        self._state = State.NOT_STARTED

        try:
            if connection is not None:
                try:
                    connection.unbind_s()
                except Exception:
                    logger.warning("Could not close LDAP connection",
                                   exc_info=True)
            if context is not None:
                try:
                    context.close()
                except Exception:
                    logger.warning("Could not close directory context, "
                                   "forcing server shutdown anyway",
                                   exc_info=True)
        finally:
            try:
                self._server.stop(force=True)
            except Exception:
                logger.warning("Could not shut down the embedded LDAP server",
                               exc_info=True)

    @contextlib.contextmanager
    def running(self, description=None):
        self._start()
        logger.debug("Embedded LDAP server started for %s",
                     description or "anonymous run")
        try:
            yield self
        finally:
            self._teardown()

    def wrap(self, unit, description=None):
        """
        Return a callable running unit with the server started before and
        torn down after it, whatever the outcome. Arguments are passed
        through, exceptions from unit reach the caller after teardown.
        """
        @functools.wraps(unit)
        def wrapped(*args, **kwargs):
            with self.running(description):
                return unit(*args, **kwargs)
        return wrapped
