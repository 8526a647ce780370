import argparse
import logging
import sys

import pygame

from chip8.addresses import VIDEO_PITCH
from chip8.cpu import CPU
from chip8.exception import RomLoadException, UnknownOpCodeException
from chip8.screen import Screen

LOG_FORMAT = "[%(levelname)s]:  %(message)s"

logger = logging.getLogger(__name__)


def build_parser():
    """
    Builds the command-line parser. The three positional arguments are
    required; anything else is optional.
    """
    parser = argparse.ArgumentParser(
        prog="chip8",
        description="Starts a simple Chip 8 emulator"
    )
    parser.add_argument(
        "scale", type=int,
        help="the scale factor to apply to the 64x32 display")
    parser.add_argument(
        "delay", type=int,
        help="the number of milliseconds to wait between CPU cycles")
    parser.add_argument(
        "rom", help="the ROM file to load on startup")
    parser.add_argument(
        "--seed", type=int, default=None,
        help="seed for the random number generator used by Cxkk")
    parser.add_argument(
        "--strict", action="store_true",
        help="stop on unknown op-codes instead of skipping them")
    parser.add_argument(
        "--log-level", default="WARNING", dest="log_level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="logging verbosity (default is WARNING)")
    return parser


def screen_cpu_connector(args):
    """
    Runs the main emulator loop with the specified arguments. A cycle is run
    whenever more than args.delay milliseconds have passed since the last
    one, and the screen is redrawn after each cycle that touched it.

    :param args: the parsed command-line arguments
    :return: the process exit status
    """
    project_cpu = CPU(seed=args.seed, strict=args.strict)
    try:
        project_cpu.cpu_load_rom(args.rom)
    except RomLoadException as error:
        logger.error("%s", error)
        return 1

    pygame.init()
    project_screen = Screen(ratio=args.scale, title="CHIP-8 Emulator - {}".format(args.rom))
    project_screen.init_display()
    last_cycle_time = pygame.time.get_ticks()
    running = True

    try:
        while running:
            running = not project_screen.process_input(project_cpu.keypad)

            current_time = pygame.time.get_ticks()
            if current_time - last_cycle_time > args.delay:
                last_cycle_time = current_time
                project_cpu.cpu_cycle()
                if project_cpu.draw_flag:
                    project_screen.update_screen(project_cpu.video, VIDEO_PITCH)
            else:
                pygame.time.wait(1)
    except UnknownOpCodeException as error:
        logger.error("%s\n%s", error, project_cpu)
        return 1
    finally:
        logger.debug("Final CPU state:\n%s", project_cpu)
        pygame.quit()
    return 0


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level, format=LOG_FORMAT, stream=sys.stdout)
    return screen_cpu_connector(args)


if __name__ == "__main__":
    sys.exit(main())
