import csv
import html
import json
import os
import xml.etree.ElementTree as ET
from datetime import datetime
from typing import List, Sequence

from pynetsweep.models import HostReport, Protocol

EXPORT_FORMATS = ('json', 'csv', 'html', 'xml')


def field_name(protocol) -> str:
    protocol = Protocol(protocol)
    if protocol is Protocol.ARP:
        return "MAC"
    return f"Open {protocol.value.upper()} ports"


def to_rows(reports: Sequence[HostReport], protocol) -> List[List[str]]:
    return [[r.host, r.render(protocol)] for r in reports]


def default_filename(protocol, file_format, out_dir="."):
    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    return os.path.join(out_dir, f"{Protocol(protocol).value}_scan_{ts}.{file_format}")


def export_results(reports, protocol, filename, file_format="json"):
    file_format = file_format.lower()
    if file_format not in EXPORT_FORMATS:
        raise ValueError("Unsupported export format: " + file_format)
    directory = os.path.dirname(filename)
    if directory:
        os.makedirs(directory, exist_ok=True)
    reports = list(reports)
    protocol = Protocol(protocol)
    if file_format == 'json':
        _export_json(reports, protocol, filename)
    elif file_format == 'csv':
        _export_csv(reports, protocol, filename)
    elif file_format == 'html':
        _export_html(reports, protocol, filename)
    else:
        _export_xml(reports, protocol, filename)
    return filename


def _export_json(reports, protocol, filename):
    payload = []
    for r in reports:
        entry = {"host": r.host, "protocol": protocol.value}
        if protocol is Protocol.ARP:
            entry["mac"] = r.mac
        else:
            entry["ports"] = list(r.open_ports(protocol))
        payload.append(entry)
    with open(filename, 'w') as f:
        json.dump(payload, f, indent=2)


def _export_csv(reports, protocol, filename):
    with open(filename, 'w', newline='') as f:
        writer = csv.writer(f)
        writer.writerow(['IP', field_name(protocol)])
        writer.writerows(to_rows(reports, protocol))


def _export_html(reports, protocol, filename):
    with open(filename, 'w', encoding='utf-8') as f:
        f.write("<html><body>\n")
        f.write(f"<h1>{protocol.value.upper()} scan results</h1>\n")
        f.write(f"<p>Responsive hosts: {len(reports)}</p>\n")
        f.write("<table>\n")
        f.write(f"<tr><th>IP</th><th>{html.escape(field_name(protocol))}</th></tr>\n")
        for host, value in to_rows(reports, protocol):
            f.write(f"<tr><td>{html.escape(host)}</td><td>{html.escape(value)}</td></tr>\n")
        f.write("</table>\n</body></html>\n")


def _export_xml(reports, protocol, filename):
    root = ET.Element("scan", protocol=protocol.value)
    for r in reports:
        host = ET.SubElement(root, "host", address=r.host)
        if protocol is Protocol.ARP:
            ET.SubElement(host, "mac").text = r.mac
        else:
            for port in r.open_ports(protocol):
                ET.SubElement(host, "port", number=str(port))
    ET.ElementTree(root).write(filename, encoding="utf-8", xml_declaration=True)
