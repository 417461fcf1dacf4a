"""Node-based dataflow graphs: typed ports, data models, connections, styles and XML flow scenes."""

__version__ = "0.1.0"