# src/retro_chip8/arch/chip8/__init__.py
"""
CHIP-8 Architecture Package
"""
from .cpu import Chip8Cpu, create_bus
from .display import Framebuffer
from .keypad import Keypad
from .state import Chip8CpuState
