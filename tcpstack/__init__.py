"""Building blocks of a TCP/IP stack: byte streams, reassembly, TCP endpoints, ARP and routing."""

__version__ = "0.1.0"