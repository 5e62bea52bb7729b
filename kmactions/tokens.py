"""
Keyboard Maestro text tokens.

KM_TOKENS maps a PascalCase name to the raw token KM expands at run time,
e.g. 'ARandomUniqueID' -> '%RandomUUID%'. The table is built once at import
and is read-only.
"""

from types import MappingProxyType
from typing import Optional

KM_TOKENS = MappingProxyType({
    'ARandomUniqueID': '%RandomUUID%',
    'AddressBookEmail': '%AddressBook%Email%',
    'AddressBookFirstName': '%AddressBook%First%',
    'AddressBookLastName': '%AddressBook%Last%',
    'AddressBookName': '%AddressBook%Name%',
    'AddressBookNickname': '%AddressBook%Nickname%',
    'AddressBookNote': '%AddressBook%Note%',
    'AddressBookOrganization': '%AddressBook%Organization%',
    'AllAudioInputDevices': '%AudioInputDevices%',
    'AllAudioOutputDevices': '%AudioOutputDevices%',
    'AllBackgroundApplicationNames': '%Application%Background%',
    'AllForegroundApplicationNames': '%Application%Foreground%',
    'AllRunningApplicationNames': '%Application%All%',
    'AllScreenFrames': '%Screen%All%',
    'AllWindowNames': '%WindowName%All%',
    'Calculation': '%Calculate%1+2%',
    'CalculationWithResultInBinary': '%Bin8%1+2%',
    'CalculationWithResultInDecimal': '%Dec2%1+2%',
    'CalculationWithResultInHex': '%Hex2%1+2%',
    'CalculationWithResultInOctal': '%Oct3%1+2%',
    'CommaSeparatedListOfTheCurrentExecutionInstances': '%ExecutingInstances%',
    'CommaSeparatedListOfVariablesAccessedByThisMacro': '%AccessedVariables%',
    'CurrentAudioInputDevice': '%AudioInputDevice%',
    'CurrentAudioInputDeviceUID': '%AudioInputDeviceUID%',
    'CurrentAudioOutputDevice': '%AudioOutputDevice%',
    'CurrentAudioOutputDeviceUID': '%AudioOutputDeviceUID%',
    'CurrentAudioSoundEffectsDevice': '%AudioSoundEffectsDevice%',
    'CurrentAudioSoundEffectsDeviceUID': '%AudioSoundEffectsDeviceUID%',
    'CurrentMouseLocation': '%CurrentMouse%',
    'CurrentTrackAlbum': '%CurrentTrack%album%',
    'CurrentTrackArtist': '%CurrentTrack%artist%',
    'CurrentTrackName': '%CurrentTrack%name%',
    'CurrentTrackRating': '%CurrentTrack%ratingstars%',
    'Delete': '%Delete%',
    'ExecutingMacro': '%ExecutingMacro%',
    'ExecutingMacroGroup': '%ExecutingMacroGroup%',
    'ExecutingMacroGroupUUID': '%ExecutingMacroGroupUUID%',
    'ExecutingMacroUUID': '%ExecutingMacroUUID%',
    'ExecutingThisMacro': '%ExecutingThisMacro%',
    'ExecutingThisMacroGroup': '%ExecutingThisMacroGroup%',
    'ExecutingThisMacroGroupUUID': '%ExecutingThisMacroGroupUUID%',
    'ExecutingThisMacroUUID': '%ExecutingThisMacroUUID%',
    'FindPasteboard': '%FindPasteboard%',
    'FinderInsertionLocationPath': '%FinderInsertionLocation%',
    'FirstScreenFrame': '%Screen%1%',
    'FormattedICUDateTime': '%ICUDateTime%EEE, MMM d, yyyy h:mm%',
    'FormattedICUDateTimeFor': '%ICUDateTimeFor%NOW()+20%EEE, MMM d, yyyy h:mm%',
    'FormattedICUDateTimeMinus': '%ICUDateTimeMinus%3*7%Days%EEE, MMM d, yyyy h:mm%',
    'FormattedICUDateTimePlus': '%ICUDateTimePlus%3*7%Days%EEE, MMM d, yyyy h:mm%',
    'FormattedCalculation': '%CalculateFormat%1+2%#,##0.00#%',
    'FrontApplicationBundleID': '%ApplicationBundleID%1%',
    'FrontApplicationLongVersion': '%ApplicationLongVersion%1%',
    'FrontApplicationName': '%Application%1%',
    'FrontApplicationPath': '%ApplicationPath%1%',
    'FrontApplicationVersion': '%ApplicationVersion%1%',
    'FrontBrowserBundleID': '%FrontBrowserBundleID%',
    'FrontBrowserDocumentTitle': '%FrontBrowserTitle%',
    'FrontBrowserDocumentURL': '%FrontBrowserURL%',
    'FrontBrowserField': '%FrontBrowserField%document.forms[0][0]%',
    'FrontBrowserJavaScript': '%FrontBrowserJavaScript%document.forms[0].innerHTML%',
    'FrontBrowserLongVersion': '%FrontBrowserLongVersion%',
    'FrontBrowserName': '%FrontBrowserName%',
    'FrontBrowserPath': '%FrontBrowserPath%',
    'FrontBrowserReadyState': '%FrontBrowserReadyState%',
    'FrontBrowserVersion': '%FrontBrowserVersion%',
    'FrontBrowserWindowName': '%FrontBrowserWindowName%',
    'FrontWindowFrame': '%WindowFrame%1%',
    'FrontWindowName': '%WindowName%1%',
    'FrontWindowPosition': '%WindowPosition%1%',
    'FrontWindowSize': '%WindowSize%1%',
    'GoogleChromeBundleID': '%ChromeBundleID%',
    'GoogleChromeDocumentTitle': '%ChromeTitle%',
    'GoogleChromeDocumentURL': '%ChromeURL%',
    'GoogleChromeField': '%ChromeField%document.forms[0][0]%',
    'GoogleChromeJavaScript': '%ChromeJavaScript%document.forms[0].innerHTML%',
    'GoogleChromeLongVersion': '%ChromeLongVersion%',
    'GoogleChromeName': '%ChromeName%',
    'GoogleChromePath': '%ChromePath%',
    'GoogleChromeReadyState': '%ChromeReadyState%',
    'GoogleChromeVersion': '%ChromeVersion%',
    'GoogleChromeWindowName': '%ChromeWindowName%',
    'IDOfLastKeyboardMaestroEngineWindowOpenedByThisMacro': '%LastWindowID%',
    'IDOfTheLastAbortedAction': '%LastAbortedActionID%',
    'JSONFromDictionary': '%JSONFromDictionary%DictionaryName%',
    'JSONFromVariables': '%JSONFromVariables%Prefix%',
    'JSONValue': '%JSONValue%VariableName.field(field)[1]%',
    'KeyboardLayoutInputSource': '%KeyboardLayout%',
    'KeyboardMaestroLongVersion': '%KeyboardMaestroLongVersion%',
    'KeyboardMaestroVersion': '%KeyboardMaestroVersion%',
    'Linefeed': '%LineFeed%',
    'LongDate': '%LongDate%',
    'MachineIPAddress': '%MacIPAddress%',
    'MachineName': '%MacName%',
    'MachineUniqueID': '%MacUUID%',
    'MacroNameForUUID': '%MacroNameForUUID%UUID%',
    'MailBCCRecipients': '%MailBCCRecipients%',
    'MailCCRecipients': '%MailCCRecipients%',
    'MailContents': '%MailContents%',
    'MailRawSource': '%MailRawSource%',
    'MailRecipients': '%MailRecipients%',
    'MailReplyTo': '%MailReplyTo%',
    'MailSender': '%MailSender%',
    'MailSubject': '%MailSubject%',
    'MailToRecipients': '%MailToRecipients%',
    'MainScreenFrame': '%Screen%Main%',
    'MainScreenPossibleResolutions': '%ScreenResolutions%Main%',
    'MainScreenResolution': '%ScreenResolution%Main%',
    'MainScreenVisibleFrame': '%ScreenVisible%Main%',
    'MusicPlayerState': '%MusicPlayerState%',
    'NamedClipboard': '%NamedClipboard%A Named Clipboard%',
    'NamedClipboardFlavors': '%NamedClipboardFlavors%A Named Clipboard%',
    'NetworkLocation': '%NetworkLocation%',
    'NumberDate': '%NumberDate%',
    'OpaqueIDOfTheCurrentExecutionInstance': '%ExecutingInstance%',
    'OptionReturn': '%OptionReturn%',
    'PastClipboard': '%PastClipboard%1%',
    'PastClipboardFlavors': '%PastClipboardFlavors%1%',
    'PositionCursor': '%|%',
    'PreviousApplicationName': '%Application%2%',
    'PromptForSnippetPlaceholderDefaultFromVariable': '%Ask20:VarName%',
    'PromptForSnippetPlaceholderDefaultText': '%Ask20:Default%',
    'Return': '%Return%',
    'SafariBundleID': '%SafariBundleID%',
    'SafariDocumentTitle': '%SafariTitle%',
    'SafariDocumentURL': '%SafariURL%',
    'SafariField': '%SafariField%document.forms[0][0]%',
    'SafariJavaScript': '%SafariJavaScript%document.forms[0].innerHTML%',
    'SafariLongVersion': '%SafariLongVersion%',
    'SafariName': '%SafariName%',
    'SafariPath': '%SafariPath%',
    'SafariReadyState': '%SafariReadyState%',
    'SafariVersion': '%SafariVersion%',
    'SafariWindowName': '%SafariWindowName%',
    'SecondScreenFrame': '%Screen%2%',
    'ShortDate': '%ShortDate%',
    'Space': '%Space%',
    'SuccessResultOfLastAction': '%ActionResult%',
    'SystemClipboard': '%SystemClipboard%',
    'SystemClipboardFlavors': '%SystemClipboardFlavors%',
    'SystemLongVersion': '%SystemLongVersion%',
    'SystemVersion': '%SystemVersion%',
    'SystemVolume': '%SystemVolume%',
    'Tab': '%Tab%',
    'TheLastAlertButtonSelected': '%AlertButton%',
    'TheLastCustomHTMLResult': '%HTMLResult%',
    'TheLastFoundImage': '%FoundImage%',
    'TheLastPromptButtonSelected': '%PromptButton%',
    'TheMacroNameOfTheSpecifiedInstance': '%ExecutingInstanceName%',
    'TheModifiersUsedWhenCompletingAPromptWithListAction': '%PromptWithListModifiers%',
    'ThePathOfTheFrontWindowDocument': '%FrontDocumentPath%',
    'ThePathOfTheSelectedFinderItem': '%FinderSelection%',
    'ThePathsOfTheSelectedFinderItems': '%FinderSelections%',
    'TheTextEnteredInAPasteByNameAction': '%PasteByNameText%',
    'TheTextEnteredInAPromptWithListAction': '%PromptWithListText%',
    'TheTextEnteredInASelectMenuByNameAction': '%SelectMenuByNameText%',
    'Time': '%ShortTime%',
    'TimeWithSeconds': '%LongTime%',
    'TrippedTriggerClipboardFlavors': '%TriggerClipboardFlavors%',
    'TrippedTriggerClipboardValue': '%TriggerClipboard%',
    'TrippedTriggerText': '%Trigger%',
    'TrippedTriggerType': '%TriggerBase%',
    'TrippedTriggerValue': '%TriggerValue%',
    'UserHomeDirectory': '%UserHome%',
    'UserLoginID': '%UserLoginID%',
    'UserName': '%UserName%',
    'WirelessNetworkNames': '%WirelessNetwork%',
})


def is_token_name(name: Optional[str]) -> bool:
    return bool(name) and name in KM_TOKENS


def resolve_token_preset(text: str, preset: Optional[str] = None) -> str:
    """Return the token for preset, or text unchanged when no known preset is given."""
    if is_token_name(preset):
        return KM_TOKENS[preset]
    return text
