# SPDX-FileCopyrightText: 2025 Frederic Ruget <fred@atlant.is> (GitHub: @douzebis)
#
# SPDX-License-Identifier: MIT

import struct

# Names starting with this prefix are container metadata, not save data
RESERVED_PREFIX = '###'
TITLE_FILE = '###title###'
BANNER_FILE = '###banner###.ppm'
ICON_FILE = '###icon###.ppm'
ICON_FRAME_FILE = '###icon{}###.ppm'

MAX_ENTRY_COUNT = 1000
# Longest relative path, in bytes, not counting the terminating NUL
MAX_PATH_LEN = 52
PAYLOAD_ALIGNMENT = 0x40
ZERO_IV = b'\x00' * 16

BANNER_WIDTH = 192
BANNER_HEIGHT = 64
ICON_WIDTH = 48
ICON_HEIGHT = 48
MAX_ICON_COUNT = 8


# === HEADER BLOCK =============================================================

HEADER_SIZE = 0xf0c0
HEADER_MAGIC = b'WIBN'
TITLE_S = 0x80
MD5_O = 0x0e
MD5_S = 0x10
BANNER_O = 0xc0
BANNER_S = BANNER_WIDTH * BANNER_HEIGHT * 2
ICON_O = BANNER_O + BANNER_S
ICON_S = ICON_WIDTH * ICON_HEIGHT * 2
# The banner size field counts the fixed part plus one slot per icon frame
BANNER_SIZE_BASE = 0x60a0

# title_id, banner_size, perm, (pad), md5, (pad), magic, (reserved), title
HEADER_STRUCT = struct.Struct('>QIBx16s2x4s28x128s')

# 0x0000 -- title_id
# 0x0008 -- banner_size
# 0x000c -- perm
# 0x000e -- md5 (blanker while hashing)
# 0x0020 -- 'WIBN'
# 0x0040 -- title description
# 0x00c0 -- banner pixels
# 0x60c0 -- icon pixels, 8 slots


# === BACKUP DESCRIPTOR ========================================================

BACKUP_SIZE = 0x80
BACKUP_HEADER_LEN = 0x70
BACKUP_MAGIC = 0x426b0001
# Size of the header area the console adds on top of the files
BACKUP_EXTRA_SIZE = 0x3c0

# header_len, magic, ng_id, entry_count, files_size, total_size, title_id, mac
BACKUP_STRUCT = struct.Struct('>IIIII8xI64xQ6s18x')


# === ENTRY ====================================================================

ENTRY_SIZE = 0x80
ENTRY_MAGIC = 0x03adf17e
ENTRY_TYPE_FILE = 1
ENTRY_TYPE_DIR = 2
ENTRY_NAME_S = 0x45

# magic, size, perm, attr, type, name, iv
ENTRY_STRUCT = struct.Struct('>IIBBB69s16s32x')


# === SIGNATURE & CERTIFICATES =================================================

SIG_S = 60
ECC_COORD_S = 30
ECC_PRIV_S = 30
ECC_PUB_S = 60
TRAILER_SIZE = 0x40
TRAILER_MAGIC = 0x2f536969

# signature, magic
TRAILER_STRUCT = struct.Struct('>60sI')

CERT_SIZE = 0x180
CERT_SIG_TYPE = 0x00010002
CERT_KEY_TYPE_ECC = 2
# Bytes covered by the certificate's own signature
CERT_SIGNED_O = 0x80
CERT_NAME_S = 64

# sig_type, signature, issuer, key_type, name, key_id, public_key
CERT_STRUCT = struct.Struct('>I60s64x64sI64sI60s60x')

ROOT_ISSUER = 'Root-CA00000001-MS00000002'
DEVICE_NAME = 'NG{:08x}'
APP_ISSUER = ROOT_ISSUER + '-NG{:08x}'
APP_NAME = 'AP{:08x}{:08x}'.format(1, 2)
APP_KEY_ID = 0
# 30-byte application private key: all zero but byte 10
APP_PRIVATE_KEY = b'\x00' * 10 + b'\x01' + b'\x00' * 19
# Fill byte of the draft application signature
DRAFT_SIG_BYTE = 0x51


# === KEY STORE ================================================================

SHARED = 'shared'
PRIVATE = 'private'

# (category, name, length)
SD_KEY = (SHARED, 'sd-key', 16)
SD_IV = (SHARED, 'sd-iv', 16)
MD5_BLANKER = (SHARED, 'md5-blanker', 16)
NG_ID = (PRIVATE, 'NG-id', 4)
NG_KEY_ID = (PRIVATE, 'NG-key-id', 4)
NG_MAC = (PRIVATE, 'NG-mac', 6)
NG_PRIV = (PRIVATE, 'NG-priv', ECC_PRIV_S)
NG_SIG = (PRIVATE, 'NG-sig', SIG_S)

DEFAULT_KEYS_DIR = '~/.wii'
KEYS_ENV_VAR = 'SAVEBIN_KEYS'
