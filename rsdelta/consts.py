"""Magic numbers and command bytes of the rsync signature and delta formats."""

MD4_MAGIC = 0x72730136
BLAKE2_MAGIC = 0x72730137
BLAKE3_MAGIC = 0x72730138
DELTA_MAGIC = 0x72730236

RS_OP_END = 0x00

RS_OP_LITERAL_1 = 0x01
RS_OP_LITERAL_64 = 0x40

RS_OP_LITERAL_N1 = 0x41
RS_OP_LITERAL_N2 = 0x42
RS_OP_LITERAL_N4 = 0x43
RS_OP_LITERAL_N8 = 0x44

RS_OP_COPY_N1_N1 = 0x45
RS_OP_COPY_N8_N8 = 0x54