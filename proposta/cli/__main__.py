# proposta/cli/__main__.py
import sys, json
from pathlib import Path

from proposta.core.calculator import ProposalSnapshot, derive
from proposta.core.render import format_currency, format_date, render_proposal
from proposta.services.proposal_builder import ProposalValidationError, build_proposal, proposal_to_input

USAGE = """Usage:
  python -m proposta.cli render <proposta.json> [template_path] [--out=proposta.html] [--draft]
  python -m proposta.cli validate <proposta.json>

Examples:
  python -m proposta.cli validate exemplos/proposta.json
  python -m proposta.cli render exemplos/proposta.json --out=proposta.html
  python -m proposta.cli render exemplos/proposta.json templates/proposta.html --out=proposta.html

--draft renderiza mesmo com campos inválidos (pré-visualização).
Abra o HTML no navegador e use Imprimir -> Salvar como PDF.
"""

def _load_json(p: str):
    try:
        return json.loads(Path(p).read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        print(f"Error reading JSON '{p}': {e}", file=sys.stderr)
        sys.exit(2)

def _print_errors(errors):
    for path, message in errors.items():
        print(f"[FAIL] {path}: {message}", file=sys.stderr)

def main(argv=None):
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) < 2:
        print(USAGE, file=sys.stderr); sys.exit(1)

    cmd = args[0].lower()
    input_path = args[1]

    # defaults
    template_path = None
    out_path = None
    draft = False

    # parse optional args (order-agnostic)
    for arg in args[2:]:
        if arg.startswith("--out="):
            out_path = arg.split("=", 1)[1]
        elif arg == "--draft":
            draft = True
        elif arg.startswith("--"):
            continue
        elif template_path is None:
            template_path = arg  # first non-flag arg after input is template

    raw = _load_json(input_path)

    if cmd == "validate":
        try:
            proposal = build_proposal(raw)
        except ProposalValidationError as exc:
            _print_errors(exc.errors)
            sys.exit(1)
        d = derive(proposal)
        print(f"[PASS] Proposta {proposal.proposal_number} ({proposal.client_name})")
        print(f"Valor global:   {format_currency(d.grand_total)}")
        print(f"Assinatura:     {format_currency(d.signature_amount)}")
        print(f"Cronograma:     {format_currency(d.scheduled_amount)}")
        print(f"Validade até:   {format_date(d.validity_date)}")
        return

    if cmd == "render":
        try:
            proposal = build_proposal(raw)
            snapshot = ProposalSnapshot(raw=proposal_to_input(proposal), proposal=proposal, derived=derive(proposal))
        except ProposalValidationError as exc:
            if not draft:
                _print_errors(exc.errors)
                sys.exit(1)
            snapshot = ProposalSnapshot(raw=raw, proposal=None, derived=derive(raw))

        r = render_proposal(snapshot, template_path=template_path)
        if out_path:
            Path(out_path).write_text(r["html"], encoding="utf-8")
            print(f"{r['title']} -> {out_path}")
        else:
            sys.stdout.write(r["html"])
        return

    print(USAGE, file=sys.stderr); sys.exit(1)

if __name__ == "__main__":
    main()
