#!/usr/bin/env python
"""
ownCloud / Nextcloud properties commonly requested from the files
endpoint (remote.php/dav/files/<user>/).
"""
from ncdav.protocol.tags import TagIdentity


def _oc(name: str) -> TagIdentity:
    return TagIdentity("oc", name)


def _nc(name: str) -> TagIdentity:
    return TagIdentity("nc", name)


# ownCloud namespace
Id = _oc("id")
FileId = _oc("fileid")
Size = _oc("size")
Permissions = _oc("permissions")
Favorite = _oc("favorite")
Tags = _oc("tags")
CommentsUnread = _oc("comments-unread")
CommentsCount = _oc("comments-count")
OwnerId = _oc("owner-id")
OwnerDisplayName = _oc("owner-display-name")
ShareType = _oc("share-type")
Checksums = _oc("checksums")
Checksum = _oc("checksum")

# Nextcloud namespace
ShareTypes = _nc("share-types")
HasPreview = _nc("has-preview")
MountType = _nc("mount-type")
IsEncrypted = _nc("is-encrypted")
ContainedFileCount = _nc("contained-file-count")
ContainedFolderCount = _nc("contained-folder-count")
Sharees = _nc("sharees")
Sharee = _nc("sharee")
UploadTime = _nc("upload_time")
CreationTime = _nc("creation_time")
RichWorkspace = _nc("rich-workspace")
