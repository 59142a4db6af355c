"""Building blocks for reactor-style network services: time, logging, synchronisation, buffers, addresses, sockets and channels."""

__version__ = "0.1.0"