#!/usr/bin/env python3
"""
Command-line driver for the signal feature extraction & scoring engine.

Runs captured session data through the complete flow:
1. Voice analysis (one captured callback window + spectrum)
2. Attention analysis (one tracking exercise run)
3. External modalities (pre-built facial / writing metric sets)
4. Weighted scoring per modality
5. Merge into the assessment aggregate (optionally finalize)

Usage:
    python main.py --audio capture.npz --tracking run.json --output result.json

Input formats:
- --audio: .npz with arrays `window`, `spectrum` and scalar `sample_rate`
  (optional `fft_size`, defaults to the configured value)
- --tracking: JSON list of samples with pointer_x, pointer_y, target_x,
  target_y, timestamp_ms (camelCase keys accepted)
- --facial / --writing: JSON object mapping metric name -> value in [0, 1]
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Dict, Optional

import numpy as np

from audio_pipeline import synthesize_voice_metrics, VoiceAnalysisConfig
from attention_tracking import (
    synthesize_attention_metrics,
    tracking_samples_from_records,
    TrackingConfig,
)
from scoring import load_profiles, score_voice, score_attention, score_external_modality
from assessment import AssessmentRegistry, ModalitySlot, build_diagnostic_request
from utils.config_loader import load_config, DEFAULT_CONFIG_PATH
from utils.errors import SignalEngineError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stderr)]
)

logger = logging.getLogger(__name__)


def _load_json(path: Path):
    with open(path, 'r') as f:
        return json.load(f)


def run_assessment(args: argparse.Namespace, config: Dict) -> Dict:
    """
    Execute the flow for one assessment and return its dictionary form.

    Args:
        args: Parsed command-line arguments
        config: Engine configuration dictionary

    Returns:
        Aggregate dict (plus the diagnostic request when requested)
    """
    profiles = load_profiles(config)
    registry = AssessmentRegistry()
    aggregate = registry.create(
        child_name=args.child_name or "",
        child_age=args.child_age,
        assessment_id=args.assessment_id,
    )
    assessment_id = aggregate.assessment_id

    if args.audio:
        logger.info(f"Voice analysis: {args.audio}")
        voice_config = VoiceAnalysisConfig.from_config(config)
        with np.load(args.audio) as capture:
            fft_size = int(capture['fft_size']) if 'fft_size' in capture.files else voice_config.fft_size
            voice = synthesize_voice_metrics(
                capture['window'],
                capture['spectrum'],
                sample_rate=float(capture['sample_rate']),
                fft_size=fft_size,
                config=voice_config,
            )
        registry.merge_modality(assessment_id, ModalitySlot.VOICE, score_voice(voice, profiles, config))

    if args.tracking:
        logger.info(f"Attention analysis: {args.tracking}")
        samples = tracking_samples_from_records(_load_json(args.tracking))
        attention = synthesize_attention_metrics(samples, TrackingConfig.from_config(config))
        registry.merge_modality(assessment_id, ModalitySlot.ATTENTION, score_attention(attention, profiles))

    for slot, path in ((ModalitySlot.FACIAL, args.facial), (ModalitySlot.WRITING, args.writing)):
        if path:
            logger.info(f"{slot.value.capitalize()} metrics: {path}")
            result = score_external_modality(slot.value, _load_json(path), profiles)
            registry.merge_modality(assessment_id, slot, result)

    if args.finalize:
        registry.finalize(assessment_id)

    aggregate = registry.get(assessment_id)
    output = aggregate.to_dict()
    if args.diagnostic_request:
        output['diagnosticRequest'] = build_diagnostic_request(aggregate)

    return output


def main(argv: Optional[list] = None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='Multi-modal signal feature extraction and weighted scoring',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Attention run only
  python main.py --tracking run.json

  # Full session, completed, written to file
  python main.py --audio capture.npz --tracking run.json --facial facial.json \\
      --writing writing.json --child-age 6 --finalize --output result.json
        """
    )

    parser.add_argument('--config', type=str, default=str(DEFAULT_CONFIG_PATH),
                        help=f'Path to configuration YAML file (default: {DEFAULT_CONFIG_PATH})')
    parser.add_argument('--assessment-id', type=str, default=None,
                        help='Assessment id (default: auto-assigned)')
    parser.add_argument('--child-name', type=str, default=None, help="Child's name")
    parser.add_argument('--child-age', type=int, default=None, help="Child's age in years")
    parser.add_argument('--audio', type=Path, help='Captured audio callback (.npz)')
    parser.add_argument('--tracking', type=Path, help='Tracking exercise samples (.json)')
    parser.add_argument('--facial', type=Path, help='Facial expression metric set (.json)')
    parser.add_argument('--writing', type=Path, help='Handwriting metric set (.json)')
    parser.add_argument('--finalize', action='store_true', help='Mark the assessment completed')
    parser.add_argument('--diagnostic-request', action='store_true',
                        help='Include the diagnostic collaborator payload in the output')
    parser.add_argument('--output', type=Path, default=None,
                        help='Output JSON file (default: stdout)')

    args = parser.parse_args(argv)

    for name in ('audio', 'tracking', 'facial', 'writing'):
        path = getattr(args, name)
        if path is not None and not path.exists():
            logger.error(f"Input file not found: {path}")
            sys.exit(1)

    config_path = Path(args.config)
    if not config_path.exists():
        logger.error(f"Config file not found: {config_path}")
        sys.exit(1)

    config = load_config(config_path)

    try:
        result = run_assessment(args, config)
    except SignalEngineError as e:
        logger.error(f"Assessment failed: {type(e).__name__}: {e}")
        sys.exit(2)
    except KeyboardInterrupt:
        logger.warning("Analysis interrupted by user")
        sys.exit(1)

    text = json.dumps(result, indent=2)
    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(text)
        logger.info(f"Results written to {args.output}")
    else:
        print(text)


if __name__ == '__main__':
    main()
