"""DOCX rendering of proposals."""
import zipfile
from datetime import datetime, timezone
from io import BytesIO

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Pt

DOCX_MIMETYPE = 'application/vnd.openxmlformats-officedocument.wordprocessingml.document'

SECTIONS = (
    ('Introduction', 'introduction'),
    ('Reasoning', 'reasoning'),
    ('Action mandate', 'action_mandate'),
)

CITATIONS = (
    ('Problems', 'used_problems'),
    ('Arguments', 'used_arguments'),
    ('Counter arguments', 'used_counter_arguments'),
    ('Negations', 'used_negations'),
    ('Action mandates', 'used_action_mandates'),
    ('Fraction interests', 'used_fraction_interests'),
)


def _normalize_zip(data: bytes) -> bytes:
    """Fixed timestamps and sorted entries so equal content gives equal bytes."""
    out = BytesIO()
    with zipfile.ZipFile(BytesIO(data), 'r') as zin, zipfile.ZipFile(out, 'w', compression=zipfile.ZIP_DEFLATED) as zout:
        for name in sorted(zin.namelist()):
            info = zipfile.ZipInfo(filename=name, date_time=(1980, 1, 1, 0, 0, 0))
            info.compress_type = zipfile.ZIP_DEFLATED
            info.external_attr = 0o600 << 16
            zout.writestr(info, zin.read(name))
    return out.getvalue()


def _add_text(doc, text: str):
    for line in text.splitlines():
        doc.add_paragraph(line.rstrip())


def render_proposal_docx(proposal) -> bytes:
    doc = Document()
    doc.styles['Normal'].font.size = Pt(11)

    heading = doc.add_heading(proposal.title, level=1)
    heading.alignment = WD_ALIGN_PARAGRAPH.LEFT
    if proposal.sponsor:
        doc.add_paragraph(f'Sponsor: {proposal.sponsor}')

    for title, field in SECTIONS:
        text = getattr(proposal, field)
        if not text:
            continue
        doc.add_heading(title, level=2)
        _add_text(doc, text)

    for title, relation in CITATIONS:
        usages = list(getattr(proposal, relation).all())
        if not usages:
            continue
        doc.add_heading(title, level=2)
        for usage in usages:
            doc.add_paragraph(usage.item.description, style='List Bullet')

    if proposal.url:
        doc.add_paragraph(proposal.url)

    epoch = datetime(1970, 1, 1, tzinfo=timezone.utc)
    core = doc.core_properties
    core.title = proposal.title
    core.author = proposal.project.title or ''
    core.created = epoch
    core.modified = epoch
    core.last_printed = epoch

    buffer = BytesIO()
    doc.save(buffer)
    return _normalize_zip(buffer.getvalue())
