from mameutility.core.models import AssetKind, PartitionMode

PARTITION_COMMANDS = {
    "full": PartitionMode.FULL,
    "manufacturer": PartitionMode.MANUFACTURER,
    "year": PartitionMode.YEAR,
    "sourcefile": PartitionMode.SOURCE_FILE,
}

COPY_COMMANDS = {
    "copy-roms": AssetKind.ROM,
    "copy-images": AssetKind.IMAGE,
}

PARTITION_HELP_TEXT = {
    mode_name: mode.description for mode_name, mode in PARTITION_COMMANDS.items()
}

OUTPUT_HELP_TEXT = {
    "full": "Output XML file for the full list",
    "manufacturer": "Output folder (one <manufacturer>.xml per manufacturer)",
    "year": "Output folder (one <year>.xml per year)",
    "sourcefile": "Output folder (one <sourcefile>.xml per driver source file)",
}

WORKERS_HELP_TEXT = (
    "Number of worker threads.\n"
    "  softwarelist : parallel file loading (default: CPU count)\n"
    "  copy-*       : parallel copy within a batch of 50 records (default: 1)"
)

EPILOG_TEXT = """
Examples:
  Split a MAME catalog into one list per manufacturer
  %(prog)s manufacturer -i mame.xml -o lists/manufacturer

  Same catalog as one full list
  %(prog)s full -i mame.xml -o lists/mame_full.xml

  Combine every software list of a hash folder into one list
  %(prog)s softwarelist -i hash/ -o lists/software.xml

  Merge several lists into one XML plus its binary DAT (merged.dat)
  %(prog)s merge lists/capcom.xml lists/software.xml -o merged.xml

  Copy the ROMs named by a list, with progress
  %(prog)s copy-roms lists/capcom.xml -s roms/ -d picked/ -v

  Show what a DAT file contains
  %(prog)s dat-info merged.dat
"""
