REASON_CONTENT_UPLOAD = 'content-upload'
REASON_PATH_COMPLETE = 'path-complete'
REASON_VIEW_COMPLETE = 'view-complete'
REASON_LIKE = 'like'
REASON_SAVE = 'save'
REASON_COMMENT = 'comment'

# Fixed XP per engagement action on a piece of content.
ACTION_REWARD_XP = {
    REASON_VIEW_COMPLETE: 5,
    REASON_LIKE: 10,
    REASON_SAVE: 15,
    REASON_COMMENT: 20,
}
