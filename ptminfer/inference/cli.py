"""
Command line interface for peptide inference
"""

import logging
import os
import sys
import time

import click

from .config import InferenceConfig
from .constants import DEFAULT_CONFIG, SCORE_MODES
from .core import PeptideInference
from .idxml import (
    build_match_store,
    load_identifications,
    store_identifications,
    update_identifications,
)
from .modifications import PyOpenMSModificationProvider

logger = logging.getLogger(__name__)


@click.command()
@click.option(
    "-id",
    "--input-id",
    "input_id",
    required=True,
    type=click.Path(exists=True),
    help="Input identification file with site scores (idXML)",
)
@click.option(
    "-out",
    "--output",
    "output",
    required=True,
    type=click.Path(),
    help="Output file (idXML)",
)
@click.option(
    "--score-mode",
    type=click.Choice(SCORE_MODES, case_sensitive=False),
    default=DEFAULT_CONFIG["score_mode"],
    help="Site score used as localization metric (default: probabilistic)",
)
@click.option(
    "--variable-modifications",
    multiple=True,
    default=DEFAULT_CONFIG["variable_modifications"],
    help="Variable modifications to localize (default: Phospho (S), Phospho (T), Phospho (Y))",
)
@click.option(
    "--fixed-modifications",
    multiple=True,
    default=DEFAULT_CONFIG["fixed_modifications"],
    help="Fixed modifications (default: Carbamidomethyl (C))",
)
@click.option(
    "--site-scores-meta-value",
    default=DEFAULT_CONFIG["site_scores_meta_value"],
    help="Hit meta value holding the site scores (default: PhosphoRS_site_probs)",
)
@click.option(
    "--confident-threshold",
    type=float,
    default=DEFAULT_CONFIG["confident_threshold"],
    help="Minimum site score of a confident placement, in percent (default: 95.0)",
)
@click.option(
    "--debug",
    is_flag=True,
    help="Enable debug output and write debug log",
)
@click.option(
    "--log-file",
    type=str,
    default=None,
    help="Log file path (only used in debug mode, default: {output_base}_inference.log)",
)
def infer(
    input_id,
    output,
    score_mode,
    variable_modifications,
    fixed_modifications,
    site_scores_meta_value,
    confident_threshold,
    debug,
    log_file,
):
    """
    Resolve ambiguous modification sites from related spectra.

    Sites confidently localized on one spectrum are propagated to spectra
    that identified the same peptide, or a peptide containing or contained
    in it.
    """
    try:
        setup_logging(debug, log_file, output)

        tool = InferenceTool()
        exit_code = tool.run(
            input_id=input_id,
            output=output,
            config={
                "score_mode": score_mode.lower(),
                "variable_modifications": list(variable_modifications),
                "fixed_modifications": list(fixed_modifications),
                "site_scores_meta_value": site_scores_meta_value,
                "confident_threshold": confident_threshold,
            },
        )

        sys.exit(exit_code)

    except KeyboardInterrupt:
        click.echo("\nOperation cancelled by user", err=True)
        sys.exit(1)
    except Exception as e:
        click.echo(f"Error: {str(e)}", err=True)
        if debug:
            logger.exception(f"Error: {str(e)}")
        sys.exit(1)


def setup_logging(debug, log_file, output):
    """
    Route inference logs to the console, and in debug mode to a log file
    next to the output idXML.
    """
    level = logging.DEBUG if debug else logging.INFO
    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Clear existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # Per-match moves are only written in debug mode
    if debug:
        log_file_path = log_file or f"{os.path.splitext(output)[0]}_inference.log"
        file_handler = logging.FileHandler(log_file_path, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    # Quiet the libraries behind idXML I/O and the site solver
    for name in ("pyopenms", "scipy"):
        logging.getLogger(name).setLevel(logging.WARNING)


class InferenceTool:
    """Loads identifications, runs the inference and stores the result"""

    def run(self, input_id, output, config=None) -> int:
        start = time.time()
        config = InferenceConfig(config)

        protein_ids, peptide_ids = load_identifications(input_id)
        store = build_match_store(peptide_ids, config)

        inference = PeptideInference(store, PyOpenMSModificationProvider(), config)
        report = inference.run()

        update_identifications(peptide_ids, store)
        store_identifications(output, protein_ids, peptide_ids)

        elapsed = time.time() - start
        logger.info(
            f"Processed {report.n_matches} spectrum matches in {elapsed:.2f} s: "
            f"{report.n_resolved} resolved, {report.n_unresolved} unresolved, "
            f"{len(report.failures)} failed"
        )
        return 0


def main():
    """Entry point for standalone inference CLI."""
    infer()


if __name__ == "__main__":
    main()
