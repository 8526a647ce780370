import logging

import pygame
from pygame import display, draw, Color, HWSURFACE, DOUBLEBUF

from chip8.addresses import CELL_SIZE, PIXEL_ON, VIDEO_HEIGHT, VIDEO_PITCH, VIDEO_WIDTH

logger = logging.getLogger(__name__)

SCREEN_NAME = 'CHIP-8 Emulator'

# The depth of the screen is the number of bits used to represent the color
# of a pixel.
SCREEN_DEPTH = 32

# The colors of the pixels to draw. The Chip 8 supports two colors: 0 (off)
# and 1 (on). The format of the colors is in RGBA format.
PIXEL_COLORS = {
    0: Color(0, 0, 0, 255),
    1: Color(250, 250, 250, 255)
}

# The keyboard layout for the CHIP-8 is:
#   1 2 3 C
#   4 5 6 D
#   7 8 9 E
#   A 0 B F
#
# which maps to the following keys on our keyboard:
#   1 2 3 4
#   Q W E R
#   A S D F
#   Z X C V
KEY_MAPPINGS = {
    pygame.K_x: 0x0,
    pygame.K_1: 0x1,
    pygame.K_2: 0x2,
    pygame.K_3: 0x3,
    pygame.K_q: 0x4,
    pygame.K_w: 0x5,
    pygame.K_e: 0x6,
    pygame.K_a: 0x7,
    pygame.K_s: 0x8,
    pygame.K_d: 0x9,
    pygame.K_z: 0xA,
    pygame.K_c: 0xB,
    pygame.K_4: 0xC,
    pygame.K_r: 0xD,
    pygame.K_f: 0xE,
    pygame.K_v: 0xF,
}


class Screen(object):
    """
    A class to show a Chip 8 framebuffer in a window. The original Chip 8
    screen was 64 x 32 with 2 colors. The framebuffer handed to
    update_screen() holds one cell per pixel; any cell equal to PIXEL_ON is
    drawn in color 1, everything else in color 0.
    """
    def __init__(self, ratio, title=SCREEN_NAME, screen_height=VIDEO_HEIGHT,
                 screen_width=VIDEO_WIDTH):
        """
        Initializes the main screen. The scaling ratio is used to modify
        the size of the main screen, since the original resolution of the
        Chip 8 was 64 x 32, which is quite small.

        :param ratio: the scaling factor to apply to the screen
        :param title: the window caption
        :param screen_height: the height of the framebuffer
        :param screen_width: the width of the framebuffer
        """
        self.screen_height = screen_height
        self.screen_width = screen_width
        self.scaling_ratio = ratio
        self.screen_title = title
        self.screen_surface = None

    def init_display(self):
        """
        Attempts to initialize a screen with the specified height and width.
        The screen will by default be of depth SCREEN_DEPTH, and will be
        double-buffered in hardware (if possible).
        """
        display.init()
        self.screen_surface = display.set_mode(
            ((self.screen_width * self.scaling_ratio),
             (self.screen_height * self.scaling_ratio)),
            HWSURFACE | DOUBLEBUF,
            SCREEN_DEPTH)
        display.set_caption(self.screen_title)
        self.screen_surface.fill(PIXEL_COLORS[0])
        display.flip()
        logger.info('Opened %dx%d display',
                    self.screen_width * self.scaling_ratio,
                    self.screen_height * self.scaling_ratio)

    def draw_screen_pixel(self, x_axis_position, y_axis_position, pixel_color):
        """
        Turn a pixel on or off at the specified location on the screen. Note
        that the pixel will not automatically be drawn on the screen, the
        drawing buffer has to be flipped to the display. The coordinate
        system starts with (0, 0) being in the top left of the screen.

        :param x_axis_position: the x coordinate to place the pixel
        :param y_axis_position: the y coordinate to place the pixel
        :param pixel_color: the color of the pixel to draw (0 or 1)
        """
        x_axis_base_position = x_axis_position * self.scaling_ratio
        y_axis_base_position = y_axis_position * self.scaling_ratio
        draw.rect(self.screen_surface,
                  PIXEL_COLORS[pixel_color],
                  (x_axis_base_position, y_axis_base_position, self.scaling_ratio, self.scaling_ratio))

    def update_screen(self, video, pitch=VIDEO_PITCH):
        """
        Draw the whole framebuffer and flip it to the display. The pitch is
        the size in bytes of one framebuffer row.

        :param video: the framebuffer cells, row-major
        :param pitch: the size in bytes of one framebuffer row
        """
        row_stride = pitch // CELL_SIZE
        for y_axis_position in range(self.screen_height):
            row_start = y_axis_position * row_stride
            for x_axis_position in range(self.screen_width):
                pixel_color = 1 if video[row_start + x_axis_position] == PIXEL_ON else 0
                self.draw_screen_pixel(x_axis_position, y_axis_position, pixel_color)
        display.flip()

    @staticmethod
    def process_input(keypad):
        """
        Drain the event queue and copy the state of the mapped keys into the
        keypad.

        :param keypad: the 16 entry keypad to update
        :return: True if the user asked to quit
        """
        quit_requested = False
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                quit_requested = True
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    quit_requested = True
                elif event.key in KEY_MAPPINGS:
                    keypad[KEY_MAPPINGS[event.key]] = True
            elif event.type == pygame.KEYUP:
                if event.key in KEY_MAPPINGS:
                    keypad[KEY_MAPPINGS[event.key]] = False
        return quit_requested
