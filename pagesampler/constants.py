"""定数。"""

# 1リクエストあたりの取得件数。これ未満のページが返れば最終ページとみなす
PAGE_SIZE = 400

# YouTrack の skip/top パラメータ名
TOP_PARAM = "$top"
SKIP_PARAM = "$skip"

USER_FIELDS = "id,login,fullName,email"
ISSUE_FIELDS = (
    "idReadable,resolved,project(shortName,name),summary,wikifiedDescription,"
    "customFields(name,localizedName,aliases,value(name))"
)
WORKITEM_FIELDS = (
    f"id,author({USER_FIELDS}),creator({USER_FIELDS}),type(name),text,"
    f"duration(minutes,presentation),date,created,updated,issue({ISSUE_FIELDS})"
)

WORKITEMS_PATH = "/workItems"

# サンプルファイル
CSV_DELIMITER = ";"
RESULTS_SUFFIX = "-results.csv"
CSV_HEADER = (
    "Request ID",
    "Request Params",
    "Work Item ID",
    "Work Item CreateDate",
    "Work Item UpdateDate",
    "Work Item Date",
    "Duration",
)

DEFAULT_TIMEZONE = "UTC"
