#!/usr/bin/env python
#
# File: $Id$
#
"""
The support for writing trace files of the conversation with the proxy
process.

Defines a method for setting up the trace writer and writing messages
to trace writer if it has been initialized.
"""

# system imports
#
import json
import logging
import logging.handlers
import time
from typing import Any, Dict, Optional

log = logging.getLogger("%s" % __name__)
trace_logger = logging.getLogger("trace")
trace_enabled = False


########################################################################
########################################################################
#
class TraceFormatter(logging.Formatter):
    """
    Prefixes each trace record with the seconds since tracing was turned on
    and the seconds since the previous record, in place of a timestamp.
    """

    def __init__(self):
        super().__init__("%(elapsed)s %(message)s")
        self.started = self.previous = time.monotonic()

    def format(self, record):
        now = time.monotonic()
        record.elapsed = "{:13.4f} {:8.4f}".format(
            now - self.started, now - self.previous
        )
        self.previous = now
        return super().format(record)


####################################################################
#
def enable_tracing(trace_file: Optional[str] = None):
    """
    Turn on tracing.

    Keyword Arguments:
    trace_file -- The file to write trace records to. Rotated every 20mb,
                  keeping 5 files. If not given trace records go to stderr.
    """
    global trace_enabled
    trace_logger.setLevel(logging.INFO)
    trace_logger.propagate = False

    h: logging.Handler
    if trace_file is None:
        log.debug("Logging trace records to stderr")
        h = logging.StreamHandler()
    else:
        log.debug("Logging trace records to '%s'", trace_file)
        h = logging.handlers.RotatingFileHandler(
            trace_file, maxBytes=20971520, backupCount=5
        )
    h.setLevel(logging.INFO)
    h.setFormatter(TraceFormatter())
    trace_logger.addHandler(h)
    trace_enabled = True


####################################################################
#
def disable_tracing():
    global trace_enabled
    trace_enabled = False
    for h in trace_logger.handlers[:]:
        trace_logger.removeHandler(h)
        h.close()


####################################################################
#
def trace(msg: Dict[str, Any]):
    """
    Write `msg` as one JSON line to the trace log, if tracing is on.
    """
    if trace_enabled:
        trace_logger.info(json.dumps(msg))
