import logging
import random

from chip8.addresses import (
    FLAG_REGISTER, FONT_SPRITE_SIZE, FONTSET, FONTSET_START_ADDRESS,
    KK_MASK, MAX_MEMORY, MAX_ROM_SIZE, MEMORY_MASK, N_MASK, NNN_MASK,
    NUM_KEYS, NUM_REGISTERS, OPCODE_MASK, PIXEL_OFF, PIXEL_ON,
    PROGRAM_COUNTER_START, SPRITE_WIDTH, STACK_SIZE, VIDEO_HEIGHT,
    VIDEO_PITCH, VIDEO_SIZE, VIDEO_WIDTH, X_MASK, Y_MASK,
)
from chip8.exception import RomLoadException, UnknownOpCodeException

logger = logging.getLogger(__name__)

# C L A S S E S ###############################################################


class CPU(object):
    """
    A class to emulate a Chip 8 CPU. There are several good resources out on
    the web that describe the internals of the Chip 8 CPU. For example:

        http://devernay.free.fr/hacks/chip8/C8TECH10.HTM
        http://michael.toren.net/mirrors/chip8/chip8def.htm

    To summarize these sources, the Chip 8 has:

        * 16 x 8-bit general purpose registers (V0 - VF**)
        * 1 x 16-bit index register (I)
        * 1 x 8-bit stack pointer (SP) into a 16 entry call stack
        * 1 x 16-bit program counter (PC)
        * 1 x 8-bit delay timer (DT)
        * 1 x 8-bit sound timer (ST)

    ** VF is a special register - it is used to store the overflow bit

    The CPU owns its framebuffer (self.video) and keypad (self.keypad). The
    host writes the keypad before calling cpu_cycle() and reads the
    framebuffer afterwards; nothing in here knows about windows or time.
    """
    def __init__(self, rng=None, seed=None, strict=False):
        """
        Initialize the Chip8 CPU with zeroed state, the font loaded and the
        program counter pointing at the start of the program area.

        :param rng: a random.Random compatible source used by Cxkk
        :param seed: seed for a new random.Random when rng is not given
        :param strict: raise UnknownOpCodeException on unknown op codes
            instead of skipping them
        """
        # There are two timer registers, one for sound and one that is general
        # purpose known as the delay timer. Both are decremented once per
        # cycle while they are non-zero.
        self.cpu_timers = {
            'delay': 0,
            'sound': 0,
        }

        # Defines the general purpose, index, stack pointer and program
        # counter registers.
        self.cpu_registers = {
            'v': [],
            'index': 0,
            'sp': 0,
            'pc': 0,
        }

        # The operation_lookup table is executed according to the most
        # significant nibble of the operand (e.g. operand 8nnn would call
        # self.cpu_execute_logical_instruction)
        self.cpu_operation_lookup = {
            0x0: self.cpu_clear_return,                  # see subfunctions below
            0x1: self.cpu_jump_to_address,               # 1nnn - JP   nnn
            0x2: self.cpu_jump_to_subroutine,            # 2nnn - CALL nnn
            0x3: self.cpu_skip_if_reg_equal_val,         # 3xkk - SE   Vx, kk
            0x4: self.cpu_skip_if_reg_not_equal_val,     # 4xkk - SNE  Vx, kk
            0x5: self.cpu_skip_if_reg_equal_reg,         # 5xy0 - SE   Vx, Vy
            0x6: self.cpu_move_value_to_reg,             # 6xkk - LD   Vx, kk
            0x7: self.cpu_add_value_to_reg,              # 7xkk - ADD  Vx, kk
            0x8: self.cpu_execute_logical_instruction,   # see subfunctions below
            0x9: self.cpu_skip_if_reg_not_equal_reg,     # 9xy0 - SNE  Vx, Vy
            0xA: self.cpu_load_index_reg_with_value,     # Annn - LD   I, nnn
            0xB: self.cpu_jump_to_v0_plus_value,         # Bnnn - JP   V0, nnn
            0xC: self.cpu_generate_random_number,        # Cxkk - RND  Vx, kk
            0xD: self.cpu_draw_sprite,                   # Dxyn - DRW  Vx, Vy, n
            0xE: self.cpu_keyboard_routines,             # see subfunctions below
            0xF: self.cpu_misc_routines,                 # see subfunctions below
        }

        # Invoked when the operand starts with 0, keyed on the lowest nibble
        # (00E0 and 00EE). 0nnn SYS calls are ignored.
        self.cpu_clear_return_lookup = {
            0x0: self.cpu_clear_screen,                  # 00E0 - CLS
            0xE: self.cpu_return_from_subroutine,        # 00EE - RET
        }

        # This set of operations is invoked when the operand loaded into the
        # CPU starts with 8 (e.g. operand 8xy0 would call
        # self.cpu_move_reg_into_reg)
        self.cpu_logical_operation_lookup = {
            0x0: self.cpu_move_reg_into_reg,             # 8xy0 - LD   Vx, Vy
            0x1: self.cpu_logical_or,                    # 8xy1 - OR   Vx, Vy
            0x2: self.cpu_logical_and,                   # 8xy2 - AND  Vx, Vy
            0x3: self.cpu_exclusive_or,                  # 8xy3 - XOR  Vx, Vy
            0x4: self.cpu_add_reg_to_reg,                # 8xy4 - ADD  Vx, Vy
            0x5: self.cpu_subtract_reg_from_reg,         # 8xy5 - SUB  Vx, Vy
            0x6: self.cpu_right_shift_reg,               # 8xy6 - SHR  Vx
            0x7: self.cpu_subtract_reg_from_reg1,        # 8xy7 - SUBN Vx, Vy
            0xE: self.cpu_left_shift_reg,                # 8xyE - SHL  Vx
        }

        # Invoked when the operand starts with E, keyed on the low byte
        self.cpu_keyboard_routine_lookup = {
            0x9E: self.cpu_skip_if_key_pressed,          # Ex9E - SKP  Vx
            0xA1: self.cpu_skip_if_key_not_pressed,      # ExA1 - SKNP Vx
        }

        # This set of operations is invoked when the operand loaded into the
        # CPU starts with F (e.g. operand Fx07 would call
        # self.cpu_move_delay_timer_into_reg)
        self.cpu_misc_routine_lookup = {
            0x07: self.cpu_move_delay_timer_into_reg,    # Fx07 - LD   Vx, DT
            0x0A: self.cpu_wait_for_keypress,            # Fx0A - LD   Vx, K
            0x15: self.cpu_move_reg_into_delay_timer,    # Fx15 - LD   DT, Vx
            0x18: self.cpu_move_reg_into_sound_timer,    # Fx18 - LD   ST, Vx
            0x1E: self.cpu_add_reg_into_index,           # Fx1E - ADD  I, Vx
            0x29: self.cpu_load_index_with_reg_sprite,   # Fx29 - LD   F, Vx
            0x33: self.cpu_store_bcd_in_memory,          # Fx33 - LD   B, Vx
            0x55: self.cpu_store_regs_in_memory,         # Fx55 - LD   [I], Vx
            0x65: self.cpu_read_regs_from_memory,        # Fx65 - LD   Vx, [I]
        }
        self.cpu_operand = 0
        self.cpu_strict = strict
        self.cpu_rng = rng if rng is not None else random.Random(seed)
        self.cpu_memory = bytearray(MAX_MEMORY)
        self.cpu_stack = [0] * STACK_SIZE
        self.keypad = [False] * NUM_KEYS
        self.video = [PIXEL_OFF] * VIDEO_SIZE
        self.draw_flag = False
        self.cpu_reset()

    def __str__(self):
        val = 'PC: {:04X}  OP: {:04X}  I: {:04X}  SP: {:X}\n'.format(
            self.cpu_registers['pc'], self.cpu_operand,
            self.cpu_registers['index'], self.cpu_registers['sp'])
        for index in range(NUM_REGISTERS):
            val += 'V{:X}: {:02X}\n'.format(index, self.cpu_registers['v'][index])
        val += 'DT: {:02X}  ST: {:02X}\n'.format(
            self.cpu_timers['delay'], self.cpu_timers['sound'])
        val += 'STACK: [{}]'.format(', '.join(
            '{:04X}'.format(address)
            for address in self.cpu_stack[:self.cpu_registers['sp']]))
        return val

    @property
    def sound_timer(self):
        return self.cpu_timers['sound']

    @property
    def delay_timer(self):
        return self.cpu_timers['delay']

    @property
    def sound_active(self):
        """
        True while the buzzer should be sounding.
        """
        return self.cpu_timers['sound'] != 0

    @property
    def video_pitch(self):
        """
        The size in bytes of one framebuffer row, as a renderer expects it.
        """
        return VIDEO_PITCH

    def cpu_cycle(self):
        """
        Run one fetch - decode - execute step, then tick the timers. The
        program counter is advanced by 2 before the instruction runs, so
        branching instructions overwrite it and skipping instructions add
        another 2.

        :return: the operand executed
        """
        self.draw_flag = False
        cpu_pc = self.cpu_registers['pc']
        cpu_operand = self.cpu_memory[cpu_pc & MEMORY_MASK] << 8
        cpu_operand |= self.cpu_memory[(cpu_pc + 1) & MEMORY_MASK]
        self.cpu_registers['pc'] = (cpu_pc + 2) & 0xFFFF
        self.cpu_execute_instruction(cpu_operand)
        self.cpu_decrement_timers()
        return cpu_operand

    def cpu_execute_instruction(self, cpu_operator_param):
        """
        Decode and execute a single operand. The program counter is not
        touched here other than by the instruction itself, which makes this
        the hook for executing an operand directly in tests.

        :param cpu_operator_param: the operand to execute
        :return: returns the operand executed
        """
        self.cpu_operand = cpu_operator_param & 0xFFFF
        logger.debug('PC: %04X  OP: %04X', self.cpu_registers['pc'], self.cpu_operand)
        cpu_operation = (self.cpu_operand & OPCODE_MASK) >> 12
        self.cpu_operation_lookup[cpu_operation]()
        return self.cpu_operand

    def cpu_unknown_operation(self):
        """
        Executed for any operand that does not decode to an instruction.
        Normally a no-op; in strict mode the operand is trapped.
        """
        if self.cpu_strict:
            raise UnknownOpCodeException(self.cpu_operand)
        logger.warning('Unknown op-code %04X at %04X, skipping',
                       self.cpu_operand, (self.cpu_registers['pc'] - 2) & 0xFFFF)

    def cpu_clear_return(self):
        """
        Opcodes starting with a 0 are one of the following instructions:

            0nnn - Jump to machine code function (ignored)
            00E0 - Clear the display
            00EE - Return from subroutine
        """
        if self.cpu_operand & 0x0FF0 != 0x00E0:
            self.cpu_unknown_operation()
            return
        self.cpu_clear_return_lookup.get(
            self.cpu_operand & N_MASK, self.cpu_unknown_operation)()

    def cpu_execute_logical_instruction(self):
        """
        Execute the logical instruction based upon the lowest nibble of the
        current operand.
        """
        self.cpu_logical_operation_lookup.get(
            self.cpu_operand & N_MASK, self.cpu_unknown_operation)()

    def cpu_keyboard_routines(self):
        """
        Run the specified keyboard routine based upon the low byte of the
        operand (Ex9E or ExA1).
        """
        self.cpu_keyboard_routine_lookup.get(
            self.cpu_operand & KK_MASK, self.cpu_unknown_operation)()

    def cpu_misc_routines(self):
        """
        Will execute one of the routines specified in misc_routines.
        """
        self.cpu_misc_routine_lookup.get(
            self.cpu_operand & KK_MASK, self.cpu_unknown_operation)()

    def cpu_clear_screen(self):
        """
        00E0 - CLS

        Turn every pixel in the framebuffer off.
        """
        self.video[:] = [PIXEL_OFF] * VIDEO_SIZE
        self.draw_flag = True

    def cpu_return_from_subroutine(self):
        """
        00EE - RET

        Pop the return address off the stack into the program counter. A
        return with an empty stack is ignored.
        """
        if self.cpu_registers['sp'] == 0:
            logger.error('Stack underflow at %04X, ignoring return',
                         (self.cpu_registers['pc'] - 2) & 0xFFFF)
            return
        self.cpu_registers['sp'] -= 1
        self.cpu_registers['pc'] = self.cpu_stack[self.cpu_registers['sp']]

    def cpu_jump_to_address(self):
        """
        1nnn - JP nnn

        Jump to address. The address to jump to is calculated using the bits
        taken from the operand as follows:

           Bits:  15-12    11-8      7-4      3-0
                  unused  address  address  address
        """
        self.cpu_registers['pc'] = self.cpu_operand & NNN_MASK

    def cpu_jump_to_subroutine(self):
        """
        2nnn - CALL nnn

        Jump to subroutine. Save the current program counter on the stack. The
        subroutine to jump to is taken from the operand as follows:

           Bits:  15-12    11-8      7-4      3-0
                  unused  address  address  address

        A call with a full stack is ignored.
        """
        if self.cpu_registers['sp'] >= STACK_SIZE:
            logger.error('Stack overflow at %04X, ignoring call to %03X',
                         (self.cpu_registers['pc'] - 2) & 0xFFFF,
                         self.cpu_operand & NNN_MASK)
            return
        self.cpu_stack[self.cpu_registers['sp']] = self.cpu_registers['pc']
        self.cpu_registers['sp'] += 1
        self.cpu_registers['pc'] = self.cpu_operand & NNN_MASK

    def cpu_skip_if_reg_equal_val(self):
        """
        3xkk - SE Vx, kk

        Skip if register contents equal to constant value. The calculation for
        the register and constant is performed on the operand:

           Bits:  15-12     11-8      7-4       3-0
                  unused   source  constant  constant

        The program counter is updated to skip the next instruction by
        advancing it by 2 bytes.
        """
        cpu_source = (self.cpu_operand & X_MASK) >> 8
        if self.cpu_registers['v'][cpu_source] == (self.cpu_operand & KK_MASK):
            self.cpu_registers['pc'] = (self.cpu_registers['pc'] + 2) & 0xFFFF

    def cpu_skip_if_reg_not_equal_val(self):
        """
        4xkk - SNE Vx, kk

        Skip if register contents not equal to constant value.
        """
        cpu_source = (self.cpu_operand & X_MASK) >> 8
        if self.cpu_registers['v'][cpu_source] != (self.cpu_operand & KK_MASK):
            self.cpu_registers['pc'] = (self.cpu_registers['pc'] + 2) & 0xFFFF

    def cpu_skip_if_reg_equal_reg(self):
        """
        5xy0 - SE Vx, Vy

        Skip if source register is equal to target register. The calculation
        for the registers to use is performed on the operand:

           Bits:  15-12     11-8      7-4       3-0
                  unused   source    target      0
        """
        cpu_source = (self.cpu_operand & X_MASK) >> 8
        cpu_target = (self.cpu_operand & Y_MASK) >> 4
        if self.cpu_registers['v'][cpu_source] == self.cpu_registers['v'][cpu_target]:
            self.cpu_registers['pc'] = (self.cpu_registers['pc'] + 2) & 0xFFFF

    def cpu_move_value_to_reg(self):
        """
        6xkk - LD Vx, kk

        Move the constant value into the specified register.
        """
        cpu_target = (self.cpu_operand & X_MASK) >> 8
        self.cpu_registers['v'][cpu_target] = self.cpu_operand & KK_MASK

    def cpu_add_value_to_reg(self):
        """
        7xkk - ADD Vx, kk

        Add the constant value to the specified register. The carry is
        discarded and VF is left alone.
        """
        cpu_target = (self.cpu_operand & X_MASK) >> 8
        temp = self.cpu_registers['v'][cpu_target] + (self.cpu_operand & KK_MASK)
        self.cpu_registers['v'][cpu_target] = temp & 0xFF

    def cpu_move_reg_into_reg(self):
        """
        8xy0 - LD Vx, Vy

        Move the value of the source register into the value of the target
        register. The calculation for the registers is performed on the
        operand:

           Bits:  15-12     11-8      7-4       3-0
                  unused   target    source      0
        """
        cpu_target = (self.cpu_operand & X_MASK) >> 8
        cpu_source = (self.cpu_operand & Y_MASK) >> 4
        self.cpu_registers['v'][cpu_target] = self.cpu_registers['v'][cpu_source]

    def cpu_logical_or(self):
        # 8xy1 - OR Vx, Vy
        cpu_target = (self.cpu_operand & X_MASK) >> 8
        cpu_source = (self.cpu_operand & Y_MASK) >> 4
        self.cpu_registers['v'][cpu_target] |= self.cpu_registers['v'][cpu_source]

    def cpu_logical_and(self):
        # 8xy2 - AND Vx, Vy
        cpu_target = (self.cpu_operand & X_MASK) >> 8
        cpu_source = (self.cpu_operand & Y_MASK) >> 4
        self.cpu_registers['v'][cpu_target] &= self.cpu_registers['v'][cpu_source]

    def cpu_exclusive_or(self):
        # 8xy3 - XOR Vx, Vy
        cpu_target = (self.cpu_operand & X_MASK) >> 8
        cpu_source = (self.cpu_operand & Y_MASK) >> 4
        self.cpu_registers['v'][cpu_target] ^= self.cpu_registers['v'][cpu_source]

    def cpu_add_reg_to_reg(self):
        """
        8xy4 - ADD Vx, Vy

        Add the value in the source register to the value in the target
        register, and store the result in the target register. The register
        calculations are as follows:

           Bits:  15-12     11-8      7-4       3-0
                  unused   target    source      4

        If a carry is generated, set a carry flag in register VF. VF is
        written after the target so that the flag wins when the target is VF.
        """
        cpu_target = (self.cpu_operand & X_MASK) >> 8
        cpu_source = (self.cpu_operand & Y_MASK) >> 4
        temp = self.cpu_registers['v'][cpu_target] + self.cpu_registers['v'][cpu_source]
        self.cpu_registers['v'][cpu_target] = temp & 0xFF
        self.cpu_registers['v'][FLAG_REGISTER] = 1 if temp > 0xFF else 0

    def cpu_subtract_reg_from_reg(self):
        """
        8xy5 - SUB Vx, Vy

        Subtract the value in the source register from the value in the target
        register, and store the result in the target register. The register
        calculations are as follows:

           Bits:  15-12     11-8      7-4       3-0
                  unused   target    source      5

        If a borrow is NOT generated, set a carry flag in register VF.
        """
        cpu_target = (self.cpu_operand & X_MASK) >> 8
        cpu_source = (self.cpu_operand & Y_MASK) >> 4
        cpu_source_reg = self.cpu_registers['v'][cpu_source]
        cpu_target_reg = self.cpu_registers['v'][cpu_target]
        cpu_flag = 1 if cpu_target_reg > cpu_source_reg else 0
        self.cpu_registers['v'][cpu_target] = (cpu_target_reg - cpu_source_reg) & 0xFF
        self.cpu_registers['v'][FLAG_REGISTER] = cpu_flag

    def cpu_right_shift_reg(self):
        """
        8xy6 - SHR Vx

        Shift the bits in the specified register 1 bit to the right. Bit
        0 will be shifted into register vf. Vy is not used. The register
        calculation is as follows:

           Bits:  15-12     11-8      7-4       3-0
                  unused   source   ignored      6
        """
        cpu_source = (self.cpu_operand & X_MASK) >> 8
        cpu_bit_zero = self.cpu_registers['v'][cpu_source] & 0x1
        self.cpu_registers['v'][cpu_source] = self.cpu_registers['v'][cpu_source] >> 1
        self.cpu_registers['v'][FLAG_REGISTER] = cpu_bit_zero

    def cpu_subtract_reg_from_reg1(self):
        """
        8xy7 - SUBN Vx, Vy

        Subtract the value in the target register from the value in the source
        register, and store the result in the target register.

        If a borrow is NOT generated, set a carry flag in register VF.
        """
        cpu_target = (self.cpu_operand & X_MASK) >> 8
        cpu_source = (self.cpu_operand & Y_MASK) >> 4
        cpu_source_reg = self.cpu_registers['v'][cpu_source]
        cpu_target_reg = self.cpu_registers['v'][cpu_target]
        cpu_flag = 1 if cpu_source_reg > cpu_target_reg else 0
        self.cpu_registers['v'][cpu_target] = (cpu_source_reg - cpu_target_reg) & 0xFF
        self.cpu_registers['v'][FLAG_REGISTER] = cpu_flag

    def cpu_left_shift_reg(self):
        """
        8xyE - SHL Vx

        Shift the bits in the specified register 1 bit to the left. Bit
        7 will be shifted into register vf. Vy is not used.
        """
        cpu_source = (self.cpu_operand & X_MASK) >> 8
        cpu_bit_seven = (self.cpu_registers['v'][cpu_source] >> 7) & 0x1
        self.cpu_registers['v'][cpu_source] = (self.cpu_registers['v'][cpu_source] << 1) & 0xFF
        self.cpu_registers['v'][FLAG_REGISTER] = cpu_bit_seven

    def cpu_skip_if_reg_not_equal_reg(self):
        """
        9xy0 - SNE Vx, Vy

        Skip if source register is not equal to target register.
        """
        cpu_source = (self.cpu_operand & X_MASK) >> 8
        cpu_target = (self.cpu_operand & Y_MASK) >> 4
        if self.cpu_registers['v'][cpu_source] != self.cpu_registers['v'][cpu_target]:
            self.cpu_registers['pc'] = (self.cpu_registers['pc'] + 2) & 0xFFFF

    def cpu_load_index_reg_with_value(self):
        """
        Annn - LD I, nnn

        Load index register with constant value.
        """
        self.cpu_registers['index'] = self.cpu_operand & NNN_MASK

    def cpu_jump_to_v0_plus_value(self):
        """
        Bnnn - JP V0, nnn

        Load the program counter with the address in the operand plus the
        value of register V0:

           Bits:  15-12     11-8      7-4       3-0
                  unused   address  address  address
        """
        self.cpu_registers['pc'] = (self.cpu_operand & NNN_MASK) + self.cpu_registers['v'][0]

    def cpu_generate_random_number(self):
        """
        Cxkk - RND Vx, kk

        A random number between 0 and 255 is generated. The contents of it are
        then ANDed with the constant value passed in the operand. The result is
        stored in the target register. The register and constant values are
        calculated as follows:

           Bits:  15-12     11-8      7-4       3-0
                  unused    target    value    value
        """
        cpu_value = self.cpu_operand & KK_MASK
        cpu_target = (self.cpu_operand & X_MASK) >> 8
        self.cpu_registers['v'][cpu_target] = cpu_value & self.cpu_rng.randint(0, 255)

    def cpu_draw_sprite(self):
        """
        Dxyn - DRW Vx, Vy, n

        Draws the sprite pointed to in the index register at the specified
        x and y coordinates. Drawing is done via an XOR routine, meaning that
        if the target pixel is already turned on, and a pixel is set to be
        turned on at that same location via the draw, then the pixel is turned
        off. Each sprite is 8 bits (1 byte) wide, and n sets how tall the
        sprite is. Consecutive bytes in the memory pointed to by the index
        register make up the rows of the sprite, most significant bit on the
        left. For example, assume that the index register pointed to the
        following 7 bytes:

                       bit 7 6 5 4 3 2 1 0

           byte 0          0 1 1 1 1 1 0 0
           byte 1          0 1 0 0 0 0 0 0
           byte 2          0 1 0 0 0 0 0 0
           byte 3          0 1 1 1 1 1 0 0
           byte 4          0 1 0 0 0 0 0 0
           byte 5          0 1 0 0 0 0 0 0
           byte 6          0 1 1 1 1 1 0 0

        This would draw a character on the screen that looks like an 'E'.
        The starting coordinate wraps around the screen, but pixels that
        fall off the right or bottom edge are clipped. If drawing turns a
        pixel off, VF is set to 1, otherwise it is left at 0.

           Bits:  15-12     11-8      7-4       3-0
                  unused    x_source  y_source  num_bytes
        """
        cpu_x_source = (self.cpu_operand & X_MASK) >> 8
        cpu_y_source = (self.cpu_operand & Y_MASK) >> 4
        cpu_x_pos = self.cpu_registers['v'][cpu_x_source] % VIDEO_WIDTH
        cpu_y_pos = self.cpu_registers['v'][cpu_y_source] % VIDEO_HEIGHT
        cpu_num_bytes = self.cpu_operand & N_MASK
        self.cpu_registers['v'][FLAG_REGISTER] = 0

        for cpu_y_index in range(cpu_num_bytes):
            cpu_y_coord = cpu_y_pos + cpu_y_index
            if cpu_y_coord >= VIDEO_HEIGHT:
                break
            cpu_sprite_byte = self.cpu_memory[
                (self.cpu_registers['index'] + cpu_y_index) & MEMORY_MASK]

            for cpu_x_index in range(SPRITE_WIDTH):
                cpu_x_coord = cpu_x_pos + cpu_x_index
                if cpu_x_coord >= VIDEO_WIDTH:
                    break
                if not cpu_sprite_byte & (0x80 >> cpu_x_index):
                    continue

                cpu_cell = cpu_y_coord * VIDEO_WIDTH + cpu_x_coord
                if self.video[cpu_cell] == PIXEL_ON:
                    self.cpu_registers['v'][FLAG_REGISTER] = 1
                    self.video[cpu_cell] = PIXEL_OFF
                else:
                    self.video[cpu_cell] = PIXEL_ON

        self.draw_flag = True

    def cpu_skip_if_key_pressed(self):
        """
        Ex9E - SKP Vx

        Skip the next instruction if the key named by the low nibble of Vx
        is pressed.
        """
        cpu_source = (self.cpu_operand & X_MASK) >> 8
        if self.keypad[self.cpu_registers['v'][cpu_source] & 0xF]:
            self.cpu_registers['pc'] = (self.cpu_registers['pc'] + 2) & 0xFFFF

    def cpu_skip_if_key_not_pressed(self):
        """
        ExA1 - SKNP Vx
        """
        cpu_source = (self.cpu_operand & X_MASK) >> 8
        if not self.keypad[self.cpu_registers['v'][cpu_source] & 0xF]:
            self.cpu_registers['pc'] = (self.cpu_registers['pc'] + 2) & 0xFFFF

    def cpu_move_delay_timer_into_reg(self):
        """
        Fx07 - LD Vx, DT

        Move the value of the delay timer into the target register.
        """
        cpu_target = (self.cpu_operand & X_MASK) >> 8
        self.cpu_registers['v'][cpu_target] = self.cpu_timers['delay']

    def cpu_wait_for_keypress(self):
        """
        Fx0A - LD Vx, K

        Wait for a key press and move the value of the key into the target
        register. The wait does not block: when no key is down the program
        counter is wound back so this instruction runs again next cycle.
        When several keys are down the lowest one wins.

           Bits:  15-12     11-8      7-4       3-0
                  unused    target     0         A
        """
        cpu_target = (self.cpu_operand & X_MASK) >> 8
        for cpu_keyval, cpu_pressed in enumerate(self.keypad):
            if cpu_pressed:
                self.cpu_registers['v'][cpu_target] = cpu_keyval
                return
        self.cpu_registers['pc'] = (self.cpu_registers['pc'] - 2) & 0xFFFF

    def cpu_move_reg_into_delay_timer(self):
        """
        Fx15 - LD DT, Vx
        """
        cpu_source = (self.cpu_operand & X_MASK) >> 8
        self.cpu_timers['delay'] = self.cpu_registers['v'][cpu_source]

    def cpu_move_reg_into_sound_timer(self):
        """
        Fx18 - LD ST, Vx
        """
        cpu_source = (self.cpu_operand & X_MASK) >> 8
        self.cpu_timers['sound'] = self.cpu_registers['v'][cpu_source]

    def cpu_add_reg_into_index(self):
        """
        Fx1E - ADD I, Vx

        Add the value of the register into the index register value. VF is
        not affected.
        """
        cpu_source = (self.cpu_operand & X_MASK) >> 8
        cpu_index = self.cpu_registers['index'] + self.cpu_registers['v'][cpu_source]
        self.cpu_registers['index'] = cpu_index & 0xFFFF

    def cpu_load_index_with_reg_sprite(self):
        """
        Fx29 - LD F, Vx

        Load the index with the font sprite for the hex digit in the low
        nibble of the source register. All font sprites are 5 bytes long and
        the table starts at FONTSET_START_ADDRESS.
        """
        cpu_source = (self.cpu_operand & X_MASK) >> 8
        cpu_digit = self.cpu_registers['v'][cpu_source] & 0xF
        self.cpu_registers['index'] = FONTSET_START_ADDRESS + FONT_SPRITE_SIZE * cpu_digit

    def cpu_store_bcd_in_memory(self):
        """
        Fx33 - LD B, Vx

        Take the value stored in source and place the digits in the following
        locations:

            hundreds   -> self.memory[index]
            tens       -> self.memory[index + 1]
            ones       -> self.memory[index + 2]

        For example, if the value is 123, then the following values will be
        placed at the specified locations:

             1 -> self.memory[index]
             2 -> self.memory[index + 1]
             3 -> self.memory[index + 2]
        """
        cpu_source = (self.cpu_operand & X_MASK) >> 8
        cpu_value = self.cpu_registers['v'][cpu_source]
        cpu_index = self.cpu_registers['index']
        self.cpu_memory[cpu_index & MEMORY_MASK] = cpu_value // 100
        self.cpu_memory[(cpu_index + 1) & MEMORY_MASK] = (cpu_value // 10) % 10
        self.cpu_memory[(cpu_index + 2) & MEMORY_MASK] = cpu_value % 10

    def cpu_store_regs_in_memory(self):
        """
        Fx55 - LD [I], Vx

        Store registers V0 through Vx in the memory pointed to by the index
        register. The index register itself is left unchanged.
        """
        cpu_source = (self.cpu_operand & X_MASK) >> 8
        cpu_index = self.cpu_registers['index']
        for cpu_counter in range(cpu_source + 1):
            self.cpu_memory[(cpu_index + cpu_counter) & MEMORY_MASK] = \
                    self.cpu_registers['v'][cpu_counter]

    def cpu_read_regs_from_memory(self):
        """
        Fx65 - LD Vx, [I]

        Read registers V0 through Vx from the memory pointed to by the index
        register. The index register itself is left unchanged.
        """
        cpu_source = (self.cpu_operand & X_MASK) >> 8
        cpu_index = self.cpu_registers['index']
        for cpu_counter in range(cpu_source + 1):
            self.cpu_registers['v'][cpu_counter] = \
                    self.cpu_memory[(cpu_index + cpu_counter) & MEMORY_MASK]

    def cpu_reset(self):
        """
        Reset the CPU by blanking out memory, registers, stack, timers,
        framebuffer and keypad, reloading the font and resetting the program
        counter to its starting value. Any loaded ROM has to be loaded again.
        """
        self.cpu_memory[:] = bytearray(MAX_MEMORY)
        self.cpu_memory[FONTSET_START_ADDRESS:FONTSET_START_ADDRESS + len(FONTSET)] = FONTSET
        self.cpu_registers['v'] = [0] * NUM_REGISTERS
        self.cpu_registers['pc'] = PROGRAM_COUNTER_START
        self.cpu_registers['sp'] = 0
        self.cpu_registers['index'] = 0
        self.cpu_stack[:] = [0] * STACK_SIZE
        self.cpu_timers['delay'] = 0
        self.cpu_timers['sound'] = 0
        self.keypad[:] = [False] * NUM_KEYS
        self.video[:] = [PIXEL_OFF] * VIDEO_SIZE
        self.cpu_operand = 0
        self.draw_flag = False

    def cpu_load_rom(self, rom):
        """
        Load a ROM into memory at PROGRAM_COUNTER_START. At most MAX_ROM_SIZE
        bytes are copied; anything beyond that is dropped.

        :param rom: a path to the ROM file, or the ROM contents as bytes
        :return: the number of bytes copied into memory
        :raises RomLoadException: if the file cannot be opened or read, in
            which case memory is left untouched
        """
        if isinstance(rom, (bytes, bytearray, memoryview)):
            cpu_romdata = bytes(rom)
        else:
            try:
                with open(rom, 'rb') as rom_file:
                    cpu_romdata = rom_file.read()
            except OSError as error:
                raise RomLoadException(rom, error.strerror or error) from error

        if len(cpu_romdata) > MAX_ROM_SIZE:
            logger.warning('ROM is %d bytes, truncating to %d',
                           len(cpu_romdata), MAX_ROM_SIZE)
            cpu_romdata = cpu_romdata[:MAX_ROM_SIZE]

        cpu_end = PROGRAM_COUNTER_START + len(cpu_romdata)
        self.cpu_memory[PROGRAM_COUNTER_START:cpu_end] = cpu_romdata
        logger.info('Loaded %d bytes of ROM', len(cpu_romdata))
        return len(cpu_romdata)

    def cpu_decrement_timers(self):
        """
        Decrement both the sound and delay timer.
        """
        if self.cpu_timers['delay'] != 0:
            self.cpu_timers['delay'] -= 1

        if self.cpu_timers['sound'] != 0:
            self.cpu_timers['sound'] -= 1
