"""Protocol helpers for a Nintendo Wi-Fi Connection replacement server.

Encodings, GameSpy messages and ciphers, auth tokens, configuration, the
game list, match commands, pack hashes and Mario Kart Wii ghost validation.
"""

__version__ = "0.1.0"