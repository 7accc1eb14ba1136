"""
Command execution utilities.

This module provides tools for executing diskutil commands with simplified simulation support.
"""
import logging
import os
import subprocess
import uuid
from enum import Enum
from typing import List

from macdiskutil.utils.format import TermColors, colorize

logger = logging.getLogger('macdiskutil')


class SimulationMode(Enum):
    """Enumeration for simulation modes"""
    DISABLED = 0  # Normal operation
    SIMULATE = 1  # Simulate mutating operations


class CommandRunner:
    """
    Class responsible for command execution with simulation support.
    Acts as a wrapper around subprocess.run with additional functionality.
    """
    def __init__(self, simulation_mode: SimulationMode = SimulationMode.DISABLED, colored_output: bool = True):
        """
        Initialize the command runner.

        Args:
            simulation_mode: Simulation mode to operate in
            colored_output: Whether to use colored output in terminal
        """
        self.simulation_mode = simulation_mode
        self.colored_output = colored_output
        self.commands_run = []

        # Generate a unique simulation ID
        self.simulation_id = str(uuid.uuid4())[:8]

    def run(self, cmd: List[str], check: bool = True, **kwargs) -> subprocess.CompletedProcess:
        """
        Run a command that changes the system, or simulate running it.

        Args:
            cmd: Command to run as list of strings
            check: Whether to check for non-zero return code
            **kwargs: Additional arguments to pass to subprocess.run (e.g. cwd, env)

        Returns:
            CompletedProcess instance from subprocess.run
        """
        cmd_str = ' '.join(cmd)
        logger.debug(f"Command requested: {cmd_str}")

        self.commands_run.append({
            "command": list(cmd),
            "simulated": self.simulation_mode == SimulationMode.SIMULATE
        })

        if self.simulation_mode == SimulationMode.SIMULATE:
            sim_prefix = colorize(f"[SIM:{self.simulation_id}]", TermColors.SIM, self.colored_output)
            logger.info(f"{sim_prefix} Would execute: {cmd_str}")
            return subprocess.CompletedProcess(args=cmd, returncode=0, stdout="", stderr="")

        return self._execute(cmd, check, "Command failed", **kwargs)

    def run_real(self, cmd: List[str], check: bool = True, **kwargs) -> subprocess.CompletedProcess:
        """
        Run a command for real, even in simulation mode.
        This is used for read-only queries such as diskutil info and list.

        Args:
            cmd: Command to run as list of strings
            check: Whether to check for non-zero return code
            **kwargs: Additional arguments to pass to subprocess.run (e.g. cwd, env)

        Returns:
            CompletedProcess instance from subprocess.run
        """
        logger.debug(f"Running real command: {' '.join(cmd)}")
        return self._execute(cmd, check, "Real command failed", **kwargs)

    def _execute(self, cmd: List[str], check: bool, failure_label: str, **kwargs) -> subprocess.CompletedProcess:
        cmd_str = ' '.join(cmd)
        try:
            return subprocess.run(
                cmd,
                check=check,
                text=True,
                capture_output=True,
                **kwargs
            )
        except subprocess.CalledProcessError as e:
            logger.error(colorize(f"{failure_label}: {cmd_str}", TermColors.ERROR, self.colored_output))
            logger.error(f"Return code: {e.returncode}")
            logger.error(f"Stdout: {e.stdout}")
            logger.error(f"Stderr: {e.stderr}")
            raise

    def get_simulation_report(self) -> str:
        """
        Generate a report of all simulated commands.

        Returns:
            Formatted string with report of simulated commands
        """
        if self.simulation_mode != SimulationMode.SIMULATE:
            return "Simulation mode is not active."

        report = []
        report.append("=" * 80)
        report.append(f"SIMULATION REPORT [ID: {self.simulation_id}]")
        report.append("=" * 80)
        report.append("")

        simulated = [record for record in self.commands_run if record["simulated"]]

        # Group commands by type
        command_groups = {}
        for cmd_record in simulated:
            cmd = cmd_record["command"]
            cmd_type = os.path.basename(cmd[0]) if cmd else "unknown"
            command_groups.setdefault(cmd_type, []).append(cmd_record)

        for cmd_type, cmd_records in command_groups.items():
            report.append(f"{cmd_type.upper()} COMMANDS:")
            report.append("-" * 40)

            for i, cmd_record in enumerate(cmd_records, 1):
                report.append(f"{i}. {' '.join(cmd_record['command'])}")

            report.append("")

        report.append("-" * 80)
        report.append(f"Total commands simulated: {len(simulated)}")
        report.append("=" * 80)

        return "\n".join(report)
