"""Game data table builder: CSV / Excel sources to json, php and FlatBuffers."""

__version__ = "0.1.0"
