"""
Open Babel preparation pipeline for receptors and ligands.

The builder turns a PreparationConfig into one command line per molecule.
Commands are computed once, stored on a PreparationPlan, and handed to every
platform renderer unchanged, so the Windows and POSIX scripts always run the
same strings.

Receptor flags (in order):
    -d                      delete water
    -p <pH>                 add hydrogens for pH
    --minimize --ff <ff>    minimize with a force field

Ligand flags (in order):
    -p <pH>                 add hydrogens for pH (shared pH)
    --gen3d                 generate 3D coordinates
    --partialcharge <m>     partial charges (always)
"""

import logging
from dataclasses import dataclass, field
from typing import List, Tuple

from .base import (
    MoleculeInput, PreparationConfig, PREPARATION_TOOL,
    RECEPTOR_INPUT_STEM, LIGAND_INPUT_STEM, RECEPTOR_PREPARED, LIGAND_PREPARED,
    DEFAULT_EXTENSION,
)
from .vina import format_number

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandStep:
    """One conditional fragment of a preparation command.

    Attributes:
        name: Short identifier (e.g. 'delete_water')
        args: Arguments appended to the command line
    """
    name: str
    args: Tuple[str, ...]


@dataclass
class CommandPipeline:
    """Ordered preparation steps for a single molecule.

    Attributes:
        target: 'receptor' or 'ligand'
        input_name: Raw input file name inside the package
        output_name: Prepared output file name
        tool: Preparation executable
        steps: Conditional steps, in the order they are appended
    """
    target: str
    input_name: str
    output_name: str
    tool: str = PREPARATION_TOOL
    steps: List[CommandStep] = field(default_factory=list)

    def add(self, name: str, *args: str) -> 'CommandPipeline':
        self.steps.append(CommandStep(name=name, args=tuple(args)))
        return self

    @property
    def step_names(self) -> List[str]:
        return [step.name for step in self.steps]

    def render(self) -> str:
        """Render the command line.

        File names are double-quoted, which both cmd.exe and POSIX shells
        accept, so the same string is valid on either platform.
        """
        parts = [self.tool, f'"{self.input_name}"', '-O', f'"{self.output_name}"']
        for step in self.steps:
            parts.extend(step.args)
        return ' '.join(parts)


@dataclass(frozen=True)
class PreparationPlan:
    """Rendered preparation commands plus the files they touch.

    Attributes:
        receptor_command: Command line preparing the receptor
        ligand_command: Command line preparing the ligand
        copies: (raw, prepared) pairs used when the tool is unavailable
        summary: Human-readable description lines echoed by scripts
        tool: Preparation executable checked on PATH
    """
    receptor_command: str
    ligand_command: str
    copies: Tuple[Tuple[str, str], ...]
    summary: Tuple[str, ...]
    tool: str = PREPARATION_TOOL

    @property
    def commands(self) -> Tuple[str, str]:
        return (self.receptor_command, self.ligand_command)


class PreparationPipelineBuilder:
    """Build Open Babel preparation commands from a PreparationConfig.

    Example:
        >>> builder = PreparationPipelineBuilder(PreparationConfig())
        >>> plan = builder.build()
        >>> plan.receptor_command
        'obabel "receptor_input.pdb" -O "receptor_prepared.pdbqt" -d -p 7.4 --minimize --ff mmff94'
    """

    def __init__(self, config: PreparationConfig):
        """Initialize builder.

        Args:
            config: Preparation options
        """
        self.config = config

    def receptor_pipeline(self, input_name: str) -> CommandPipeline:
        config = self.config
        pipeline = CommandPipeline('receptor', input_name, RECEPTOR_PREPARED)
        if config.remove_water:
            pipeline.add('delete_water', '-d')
        if config.protein_protonate:
            pipeline.add('protonate', '-p', format_number(config.ph_level))
        if config.add_force_field:
            pipeline.add('minimize', '--minimize', '--ff', config.force_field_type)
        return pipeline

    def ligand_pipeline(self, input_name: str) -> CommandPipeline:
        config = self.config
        pipeline = CommandPipeline('ligand', input_name, LIGAND_PREPARED)
        if config.ligand_protonate:
            pipeline.add('protonate', '-p', format_number(config.ph_level))
        if config.ligand_minimization:
            pipeline.add('gen3d', '--gen3d')
        # Charges are requested whether or not the ligand is protonated.
        pipeline.add('partial_charge', '--partialcharge', config.ligand_charge_method)
        return pipeline

    def summary_lines(self) -> Tuple[str, ...]:
        config = self.config
        protein = []
        if config.remove_water:
            protein.append('water removed')
        if config.protein_protonate:
            protein.append(f"pH {format_number(config.ph_level)}")
        if config.add_force_field:
            protein.append(f"{config.force_field_type} forcefield")
        ligand = [f"{config.ligand_charge_method} charges"]
        if config.ligand_protonate:
            ligand.append(f"pH {format_number(config.ph_level)}")
        if config.ligand_minimization:
            ligand.append('3D coordinates')
        return (
            f"Protein: {', '.join(protein) or 'no changes'}",
            f"Ligand: {', '.join(ligand)}",
        )

    def build(self, receptor_input: str = f"{RECEPTOR_INPUT_STEM}.{DEFAULT_EXTENSION}",
              ligand_input: str = f"{LIGAND_INPUT_STEM}.{DEFAULT_EXTENSION}") -> PreparationPlan:
        """Compute the preparation plan.

        Args:
            receptor_input: Raw receptor file name inside the package
            ligand_input: Raw ligand file name inside the package

        Returns:
            PreparationPlan with both command lines rendered
        """
        receptor = self.receptor_pipeline(receptor_input)
        ligand = self.ligand_pipeline(ligand_input)
        logger.debug(f"Receptor steps: {receptor.step_names}")
        logger.debug(f"Ligand steps: {ligand.step_names}")
        return PreparationPlan(
            receptor_command=receptor.render(),
            ligand_command=ligand.render(),
            copies=(
                (receptor_input, RECEPTOR_PREPARED),
                (ligand_input, LIGAND_PREPARED),
            ),
            summary=self.summary_lines(),
        )

    def build_for(self, receptor: MoleculeInput, ligand: MoleculeInput) -> PreparationPlan:
        """Compute the plan using the standard names derived from the inputs."""
        return self.build(
            receptor.standard_name(RECEPTOR_INPUT_STEM),
            ligand.standard_name(LIGAND_INPUT_STEM),
        )
