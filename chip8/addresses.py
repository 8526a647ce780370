# Memory layout, opcode masks and framebuffer geometry shared by the CPU and
# the host.

# The total amount of memory to allocate for the emulator
MAX_MEMORY = 4096

# Addresses wrap around the 4K address space
MEMORY_MASK = 0x0FFF

# Where the program counter should originally point, and where ROMs load
PROGRAM_COUNTER_START = 0x200

# The largest ROM that fits between the program start and the end of memory
MAX_ROM_SIZE = MAX_MEMORY - PROGRAM_COUNTER_START

# Where the built-in font sprites live
FONTSET_START_ADDRESS = 0x50

# Each font character is 5 bytes tall
FONT_SPRITE_SIZE = 5

# The number of return addresses the stack can hold
STACK_SIZE = 16

# The total number of registers in the Chip 8 CPU
NUM_REGISTERS = 0x10

# The flag register (VF)
FLAG_REGISTER = 0xF

# The number of keys on the hex keypad
NUM_KEYS = 0x10

# Masks used to pull the fields out of an operand:
#
#    Bits:  15-12    11-8      7-4      3-0
#           opcode     x        y        n
OPCODE_MASK = 0xF000
X_MASK = 0x0F00
Y_MASK = 0x00F0
N_MASK = 0x000F
KK_MASK = 0x00FF
NNN_MASK = 0x0FFF

# Framebuffer geometry
VIDEO_WIDTH = 64
VIDEO_HEIGHT = 32
VIDEO_SIZE = VIDEO_WIDTH * VIDEO_HEIGHT

# Each sprite row is 8 pixels wide
SPRITE_WIDTH = 8

# Framebuffer cells are 32-bit RGBA words. Only these two values are ever
# stored.
PIXEL_ON = 0xFFFFFFFF
PIXEL_OFF = 0x00000000

# Size in bytes of one framebuffer cell, and the row pitch a renderer needs
CELL_SIZE = 4
VIDEO_PITCH = CELL_SIZE * VIDEO_WIDTH

# The hex digit sprites 0-F, 5 bytes each
FONTSET = bytes([
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
])
