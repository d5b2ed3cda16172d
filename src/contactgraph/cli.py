import argparse
import os
import sys

from . import __version__
from .cache import StructureCache
from .interactions import (
    ContactAnalyzer,
    ContactThresholds,
    format_contact_table,
    get_contact_data,
    get_label_data,
)
from .structure import structure_from_rdkit
from .utils import configure_debug_logging, parse_contact_types, parse_index_set


def read_structure(path: str, sanitize: bool = True):
    """
    Read a PDB, MOL or SDF file (first record) through RDKit.
    Hydrogens present in the file are kept.
    """
    ext = os.path.splitext(path)[1].lower()
    if ext not in (".pdb", ".ent", ".mol", ".sdf"):
        raise ValueError(f"Unsupported file type {ext!r} (expected .pdb, .mol or .sdf)")

    from rdkit import Chem

    if ext in (".pdb", ".ent"):
        mol = Chem.MolFromPDBFile(path, removeHs=False, sanitize=sanitize)
    elif ext == ".mol":
        mol = Chem.MolFromMolFile(path, removeHs=False, sanitize=sanitize)
    else:
        supplier = Chem.SDMolSupplier(path, removeHs=False, sanitize=sanitize)
        mol = next((m for m in supplier if m is not None), None)
    if mol is None:
        raise ValueError(f"RDKit could not read {path}")
    return structure_from_rdkit(mol, identifier=os.path.abspath(path))


def _parse_param(text: str):
    key, sep, value = text.partition("=")
    if not sep:
        raise argparse.ArgumentTypeError(f"expected key=value, got {text!r}")
    value = value.strip()
    if value.lower() in ("true", "false"):
        return key.strip(), value.lower() == "true"
    try:
        return key.strip(), int(value)
    except ValueError:
        pass
    try:
        return key.strip(), float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"not a number or boolean: {value!r}") from exc


def print_header(path, params_used):
    print("=" * 80)
    print(" " * 33 + "CONTACTGRAPH")
    print(" " * 18 + "Non-Covalent Contacts in Molecular Structures")
    print("=" * 80)
    print()
    print(f"Version:        contactgraph v{__version__}")
    print(f"Input:          {os.path.basename(path)}")
    if params_used:
        print("Parameters:     " + ", ".join(f"{k}={v}" for k, v in params_used.items()))
    print()


def main(argv=None):
    p = argparse.ArgumentParser(description="Detect non-covalent contacts in a PDB/MOL/SDF structure.")
    p.add_argument("structure", nargs="?", help="Input structure file")
    p.add_argument("--version", action="store_true",
                   help="Print version information and exit")
    p.add_argument("-p", "--param", action="append", type=_parse_param, default=[],
                   help="Threshold override, e.g. -p maxHbondDist=3.2 (repeatable)")
    p.add_argument("--no-salt-bridges", action="store_true",
                   help="Keep hydrogen bonds that coincide with ionic interactions")
    p.add_argument("--weak-hbond-refinement", action="store_true",
                   help="Drop weak hydrogen bonds to acceptors that already have a hydrogen bond")
    p.add_argument("-t", "--types", nargs="+",
                   help="Only report these contact types (e.g. HydrogenBond PiStacking)")
    p.add_argument("-f", "--filter", type=str,
                   help="Only report contacts touching these atoms, e.g. '0-20,35'")
    p.add_argument("-u", "--unit", choices=["", "angstrom", "nm"], default="",
                   help="Unit for the distance column of --labels")
    p.add_argument("-l", "--labels", action="store_true",
                   help="Print one distance label per reported contact")
    p.add_argument("--no-sanitize", action="store_true",
                   help="Skip RDKit sanitization when reading")
    p.add_argument("-d", "--debug", action="store_true",
                   help="Enable debug output (per-stage counts and per-contact detail)")

    args = p.parse_args(argv)

    if args.version:
        print(f"contactgraph v{__version__}")
        return 0
    if not args.structure:
        p.error("the following arguments are required: structure")

    if args.debug:
        configure_debug_logging()

    params = dict(args.param)
    if args.no_salt_bridges:
        params["refine_salt_bridges"] = False
    if args.weak_hbond_refinement:
        params["refine_weak_hydrogen_bonds"] = True
    try:
        thresholds = ContactThresholds.from_params(params)
        types = parse_contact_types(args.types) if args.types else None
        filter_set = parse_index_set(args.filter)
        structure = read_structure(args.structure, sanitize=not args.no_sanitize)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print_header(args.structure, params)

    analyzer = ContactAnalyzer(structure, thresholds=thresholds, cache=StructureCache())
    contacts = analyzer.run()

    if types is None and filter_set is None:
        print(format_contact_table(structure, contacts, debug=args.debug))
    else:
        data = get_contact_data(contacts, structure, types=types, filter_sets=filter_set)
        print(f"\n  {len(data)} contact(s) selected:\n")
        for pid in range(len(data)):
            obj = data.picking.get_object(pid)
            print(f"  {obj['type']:<22s}  {structure.qualified_name(obj['atom1'])} ... "
                  f"{structure.qualified_name(obj['atom2'])}")

    if args.labels:
        data = get_contact_data(contacts, structure, types=types, filter_sets=filter_set)
        labels = get_label_data(data, unit=args.unit)
        print(f"\n{'=' * 80}\n# Distance Labels\n{'=' * 80}\n")
        for pid, text in enumerate(labels.text):
            print(f"  {data.picking.get_object(pid)['type']:<22s}  {text}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
