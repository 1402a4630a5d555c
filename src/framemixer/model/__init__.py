"""
The MODEL layer contains pure data structures and the craft file reader.
It has NO knowledge of the numerical synthesis or the output formats.
"""
