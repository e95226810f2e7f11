"""
CHIP-8命令セット実装パッケージ。
"""
from retro_chip8.arch.chip8.state import Chip8CpuState
from retro_chip8.core.instruction import Instruction
from .base import ExecutionContext
from .maps import EXECUTE_MAP, decode_opcode

# @intent:responsibility デコードされた命令を実行し、CPUの状態を変更します。
# @intent:pre-condition `instruction`はdecode_opcodeが生成したものであり、PCは既に次の命令を指している必要があります。
def execute_instruction(instruction: Instruction, state: Chip8CpuState, ctx: ExecutionContext) -> None:
    executor = EXECUTE_MAP[instruction.opcode]
    executor(state, ctx, instruction)
