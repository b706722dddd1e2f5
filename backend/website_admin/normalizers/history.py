from website_admin.utils.timestamps import to_iso


def normalize_version(version):
    return {
        "id": version.id,
        "version": version.version,
        "status": version.status,
        "editor": version.editor,
        "notes": version.notes,
        "created_at": to_iso(version.created_at),
        "updated_at": to_iso(version.updated_at),
    }
