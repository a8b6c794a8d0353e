# wiifc

Building blocks for a server that speaks the Nintendo Wi-Fi Connection and
GameSpy protocols used by Wii and DS games. It is a plain library with no
command-line tool: you import the parts you need.

## Installation

```
pip install .
```

To install with the test requirements:

```
pip install ".[test]"
```

## What is inside

- `wiifc.encoding`: the DWC Base64 alphabet (`dwc_b64encode`, `dwc_b64decode`),
  `base32_encode`, and the GameSpy Base64 dialects (`GameSpyBase64Encoding`,
  `gamespy_base64_to_base64`, `decode_gamespy_base64`).
- `wiifc.textutil`: random challenge strings (`random_string`,
  `random_hex_string`), `utf16_to_bytes`, the NUL-terminated readers
  `get_string` and `get_wide_string`, and `is_uppercase_alphanumeric`.
- `wiifc.mii`: the Mii data CRC (`rfl_calculate_crc`) and
  `rfl_search_official_data` for the official Mii IDs.
- `wiifc.friend_code`: `calc_friend_code`, `calc_friend_code_string` and
  `raw_friend_code_string`.
- `wiifc.ip_address`: dotted-quad parsing (`ip_format_to_int`,
  `ip_format_to_string`, `ip_format_to_string_le`, `ip_format_bytes`) and
  `is_reserved_ip`.
- `wiifc.gamespy_message`: `GameSpyCommand`, `parse_gamespy_message`,
  `parse_gamestats_message` and `create_gamespy_message` for
  `\key\value\final\` messages; parse errors raise `GameSpyMessageError`.
- `wiifc.encryption`: `encrypt_type_x`, the GameSpy enctype X cipher. Pass
  `seed` for a reproducible header; it defaults to the current Unix time.
- `wiifc.auth_token`: `AuthTokenCodec` issues and verifies NAS auth tokens
  (decoded into `NASAuthToken`) and GPCM login tickets. Keys left out are
  drawn at random, so a token only decodes with the codec that issued it.
- `wiifc.config`: `Config`, with `parse_config`, `load_config` and the
  caching `get_config` for `config.xml`.
- `wiifc.game_list`: `GameList` read from `game_list.tsv`, with lookups by ID
  and name, plus `expected_unit_code` and `game_needs_exploit`.
- `wiifc.mario_kart_wii`: course, character, vehicle and controller enums,
  weight classes, `verify_yaz1_data` and the `RKGhostData` ghost file reader
  and validator.
- `wiifc.match_command`: `decode_match_command` and the dataclasses it fills
  (`Reservation`, `ResvOK`, `ResvDeny`, `TellAddr`, `ServerCloseClient`,
  `SuspendMatch`, `MatchCommandData`), plus `match_command_name`.
- `wiifc.match_encode`: `encode_match_command` and `log_match_command`.
- `wiifc.hash_store`: the thread-safe in-memory `HashStore` of pack hashes
  per pack ID, version and `Region`.
- `wiifc.gamestats_codec`: the GameStats XOR stream cipher
  (`encrypt_message`, `decrypt_stream`), `PacketBuffer` for reassembling
  fragments, and web helpers (`calculate_token`, `expected_hash`,
  `sign_response`, `build_get2_response`, `http_error_page`).

## Example

```python
from wiifc.gamespy_message import GameSpyCommand, create_gamespy_message, parse_gamespy_message
from wiifc.friend_code import calc_friend_code_string
from wiifc.auth_token import AuthTokenCodec

message = create_gamespy_message(GameSpyCommand("ka", "", {}))
commands = parse_gamespy_message(message)
print(commands[0].command)  # ka

print(calc_friend_code_string(1000000004, "RMCJ"))

codec = AuthTokenCodec()
token, challenge = codec.marshal_nas_auth_token(
    "RMCJ", 1, "RMCJ0001", 0, 0, 1, "Player", 1, False, "SN0000000"
)
print(codec.unmarshal_nas_auth_token(token).ingamesn)  # Player
```

Errors are raised as exceptions (for example `GameSpyMessageError`,
`AuthTokenError`, `MatchCommandError`, `GhostValidationError`,
`BufferOverflowError`, `PackIDMissingError`) rather than returned as status
values. Diagnostics go through the standard `logging` module.

## What the package does not do

It contains no servers and opens no network connections: there is no GPCM,
GameStats, NAS or matchmaking service to run, and no HTTP API. It does not
talk to a database either; `HashStore` keeps its entries in memory only and
is filled through `load` and `update`, and user profiles, bans and stored
ghosts are not handled at all.

## Running the tests

```
pytest
```